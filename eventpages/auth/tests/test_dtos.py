from eventpages.auth.dtos import GENERIC_AUTH_MESSAGE, AuthError, AuthErrorCode


def test_known_codes_map_to_fixed_messages():
    error = AuthError(AuthErrorCode.INVALID_CREDENTIALS, "Invalid login credentials")

    assert error.user_message == "Incorrect email or password."


def test_weak_password_message_names_minimum_length():
    error = AuthError(AuthErrorCode.WEAK_PASSWORD, min_length=8)

    assert "8 characters" in error.user_message


def test_unknown_code_falls_back_to_error_text_then_generic():
    assert AuthError("captcha_failed", "Captcha verification failed").user_message == (
        "Captcha verification failed"
    )
    assert AuthError("captcha_failed").user_message == GENERIC_AUTH_MESSAGE
    assert AuthError(None).user_message == GENERIC_AUTH_MESSAGE
