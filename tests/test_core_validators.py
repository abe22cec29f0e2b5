import pytest
from werkzeug.datastructures import MultiDict

from userservice.core import validators
from userservice.core.models import FindUsersCriteria


class TestCriteriaFromPayload:
    def test_empty_payload_is_all_users(self):
        assert validators.criteria_from_payload({}) == FindUsersCriteria()
        assert validators.criteria_from_payload(None) == FindUsersCriteria()

    def test_camel_case_payload(self):
        criteria = validators.criteria_from_payload({
            "orgId": " acme ",
            "emails": ["a@example.com", " "],
            "usernames": ["bob"],
            "userIds": ["u1"],
            "queryLimit": 10,
        })
        assert criteria == FindUsersCriteria(
            org_id="acme",
            emails=("a@example.com", ""),
            usernames=("bob",),
            user_ids=("u1",),
            query_limit=10,
        )

    def test_single_string_becomes_list(self):
        criteria = validators.criteria_from_payload({"email": "a@example.com"})
        assert criteria.emails == ("a@example.com",)

    @pytest.mark.parametrize(
        "payload, message",
        [
            ([], "Search criteria must be a JSON object"),
            ({"orgId": 1}, "orgId must be a string"),
            ({"emails": {"a": 1}}, "emails must be a list of strings"),
            ({"usernames": ["bob", None]}, "usernames must be a list of strings"),
            ({"userIds": 7}, "userIds must be a list of strings"),
            ({"queryLimit": "ten"}, "queryLimit must be an integer"),
            ({"queryLimit": True}, "queryLimit must be an integer"),
            ({"queryLimit": 1.5}, "queryLimit must be an integer"),
        ],
    )
    def test_invalid_payloads(self, payload, message):
        with pytest.raises(validators.CriteriaValidationError, match=message):
            validators.criteria_from_payload(payload)


class TestValidateQueryLimit:
    @pytest.mark.parametrize("raw, expected", [(None, 0), ("", 0), (5, 5), ("-3", -3), (" 7 ", 7)])
    def test_valid_limits(self, raw, expected):
        assert validators.validate_query_limit(raw) == expected


class TestCriteriaFromQueryArgs:
    def test_repeated_and_comma_separated_values(self):
        args = MultiDict([("usernames", "bob,carol"), ("usernames", "dave"), ("orgId", "acme")])
        criteria = validators.criteria_from_query_args(args)
        assert criteria.usernames == ("bob", "carol", "dave")
        assert criteria.org_id == "acme"

    def test_snake_case_and_limit(self):
        args = MultiDict([("user_ids", "u1"), ("limit", "2")])
        criteria = validators.criteria_from_query_args(args)
        assert criteria.user_ids == ("u1",)
        assert criteria.query_limit == 2

    def test_no_args(self):
        assert validators.criteria_from_query_args(MultiDict()) == FindUsersCriteria()
