from validation import validate_user


def fields(errors):
    return [e["field"] for e in errors]


def test_valid_payload():
    assert validate_user({"username": "abcde", "password": "pw1", "email": "a@b.com"}) == []


def test_short_username():
    errors = validate_user({"username": "ab", "password": "pw1", "email": "a@b.com"})
    assert fields(errors) == ["username"]
    assert "at least 5" in errors[0]["message"]


def test_non_alphanumeric_username():
    errors = validate_user({"username": "abc_de!", "password": "pw1", "email": "a@b.com"})
    assert fields(errors) == ["username"]
    assert "alphanumeric" in errors[0]["message"]


def test_short_and_non_alphanumeric_username_reports_both():
    errors = validate_user({"username": "a-b", "password": "pw1", "email": "a@b.com"})
    assert fields(errors) == ["username", "username"]


def test_missing_password():
    assert fields(validate_user({"username": "abcde", "password": "", "email": "a@b.com"})) == ["password"]


def test_invalid_email():
    assert fields(validate_user({"username": "abcde", "password": "pw1", "email": "not-an-email"})) == ["email"]


def test_empty_payload_lists_every_field():
    assert set(fields(validate_user({}))) == {"username", "password", "email"}


def test_username_with_trailing_newline_is_rejected():
    for username in ("abcd\n", "abcde\n"):
        errors = validate_user({"username": username, "password": "pw1", "email": "a@b.com"})
        assert "username" in fields(errors)
