"""Core Business Logic Module

User search logic, independent of the HTTP framework.

Module Structure:
    - keycloak/        : Keycloak Admin API client (token handling, requests)
    - models.py        : FindUsersCriteria, User, SelectionMode
    - attributes.py    : is_internal / org_admin / type attribute normalisation
    - user_finder.py   : Criteria resolution and result aggregation
    - validators.py    : Criteria parsing from JSON payloads and query args

Usage Pattern:
    Import explicitly when needed:
        from userservice.core.user_finder import UserFinder
        from userservice.core.models import FindUsersCriteria
        from userservice.core.validators import criteria_from_payload
"""
