from use_cases.auth_errors import (
    ActivationError,
    ActivationErrorCode,
    AuthError,
    AuthErrorCode,
    ChangePasswordError,
    ChangePasswordErrorCode,
    create_activation_error,
    create_auth_error,
    create_change_password_error,
    error_code_or_unknown,
    get_auth_error_code,
)


def test_errors_carry_their_discriminant() -> None:
    auth_err = create_auth_error(AuthErrorCode.BAD_CREDENTIALS)
    activation_err = create_activation_error("nope")
    pwd_err = create_change_password_error("nope")

    assert (auth_err.name, auth_err.type) == ("EAUTH", AuthErrorCode.BAD_CREDENTIALS)
    assert (activation_err.name, activation_err.type) == ("EACTIVATION", ActivationErrorCode.ACTIVATION)
    assert (pwd_err.name, pwd_err.type) == ("ECHANGEPWD", ChangePasswordErrorCode.CHANGE_PASSWORD)
    assert isinstance(auth_err, AuthError)
    assert isinstance(activation_err, ActivationError)
    assert isinstance(pwd_err, ChangePasswordError)


def test_default_message_is_the_code_value() -> None:
    err = create_auth_error(AuthErrorCode.NOT_PREMIUM)
    assert err.message == "NOT_PREMIUM"
    assert str(err) == "NOT_PREMIUM"


def test_wrapped_error_keeps_its_cause() -> None:
    cause = ValueError("boom")
    err = create_activation_error("failed", cause=cause)
    assert err.__cause__ is cause


def test_error_code_lookup_ignores_foreign_errors() -> None:
    assert get_auth_error_code(create_auth_error(AuthErrorCode.PRE_DELETED)) == AuthErrorCode.PRE_DELETED
    assert get_auth_error_code(RuntimeError("x")) is None
    assert get_auth_error_code(create_activation_error("x")) is None
    assert error_code_or_unknown(RuntimeError("x")) == AuthErrorCode.UNKNOWN_ERROR
    assert error_code_or_unknown(None) == AuthErrorCode.UNKNOWN_ERROR
