from datetime import date, datetime, timedelta

import pytest

from docare.application.services.auth_service import AuthResult, AuthService, MfaChallenge
from docare.exceptions import APIException
from docare.infrastructure.security import encryption, jwt_tokens

from conftest import make_user


@pytest.fixture
def svc(user_repo, token_repo, audit):
    return AuthService(user_repo=user_repo, token_repo=token_repo, audit=audit, max_failed_attempts=5, lockout_minutes=30)


def test_signup_creates_patient_with_encrypted_profile(svc, user_repo, token_repo, audit):
    result = svc.signup(
        email="  New.User@Example.com ",
        password="Secret123!",
        name=" New User ",
        date_of_birth=date(1990, 5, 17),
        phone="+15551234567",
    )
    assert isinstance(result, AuthResult)
    user = result.user
    assert user.email == "new.user@example.com"
    assert user.name == "New User"
    assert user.role == "patient"
    assert user.password_hash != "Secret123!"

    profile = user_repo.get_profile(user.id)
    assert profile.date_of_birth_encrypted != "1990-05-17"
    assert encryption.decrypt(profile.date_of_birth_encrypted) == "1990-05-17"
    assert encryption.decrypt(profile.phone_encrypted) == "+15551234567"

    assert jwt_tokens.verify_access_token(result.access_token)["sub"] == user.id
    assert token_repo.tokens[0].token_hash == encryption.hash_value(result.refresh_token)
    assert ("SIGNUP", "success") in audit.actions()


def test_signup_duplicate_email_conflicts(svc, patient):
    with pytest.raises(APIException) as exc:
        svc.signup(email="PAT@example.com", password="Secret123!", name="Again")
    assert exc.value.status_code == 409


def test_login_success_resets_failures(svc, user_repo, patient, audit):
    patient.failed_login_attempts = 3
    result = svc.login("pat@example.com", "Secret123!", ip_address="10.0.0.1")
    assert isinstance(result, AuthResult)
    stored = user_repo.get_by_id(patient.id)
    assert stored.failed_login_attempts == 0
    assert stored.last_login_ip == "10.0.0.1"
    assert stored.last_login_at is not None
    assert ("LOGIN", "success") in audit.actions()


def test_login_unknown_email_is_invalid_credentials(svc):
    with pytest.raises(APIException) as exc:
        svc.login("nobody@example.com", "whatever1")
    assert exc.value.status_code == 401
    assert exc.value.detail == "Invalid credentials"


def test_login_suspended_account_forbidden(svc, patient):
    patient.status = "suspended"
    with pytest.raises(APIException) as exc:
        svc.login("pat@example.com", "Secret123!")
    assert exc.value.status_code == 403


def test_fifth_failed_login_locks_account(svc, user_repo, patient, audit):
    for _ in range(4):
        with pytest.raises(APIException) as exc:
            svc.login("pat@example.com", "wrong-password")
        assert exc.value.status_code == 401

    with pytest.raises(APIException) as exc:
        svc.login("pat@example.com", "wrong-password")
    assert exc.value.status_code == 403
    assert "locked" in exc.value.detail
    assert user_repo.get_by_id(patient.id).locked_until > datetime.utcnow() + timedelta(minutes=29)

    # Even the right password is refused while locked
    with pytest.raises(APIException) as exc:
        svc.login("pat@example.com", "Secret123!")
    assert exc.value.status_code == 403
    assert "locked_until" in exc.value.extra
    assert audit.actions().count(("LOGIN", "failure")) == 5


def test_login_allowed_after_lock_expires(svc, patient):
    patient.locked_until = datetime.utcnow() - timedelta(minutes=1)
    assert isinstance(svc.login("pat@example.com", "Secret123!"), AuthResult)
    assert patient.failed_login_attempts == 0


def test_failure_after_lock_expires_locks_again(svc, patient):
    patient.failed_login_attempts = 5
    patient.locked_until = datetime.utcnow() - timedelta(minutes=1)
    with pytest.raises(APIException) as exc:
        svc.login("pat@example.com", "wrong-password")
    assert exc.value.status_code == 403
    assert patient.failed_login_attempts == 6
    assert patient.locked_until > datetime.utcnow()


def test_audit_entries_carry_request_id(svc, patient, audit):
    svc.login("pat@example.com", "Secret123!", request_id="req-1")
    with pytest.raises(APIException):
        svc.login("pat@example.com", "wrong-password", request_id="req-2")
    svc.logout(patient.id, request_id="req-3")
    assert [e["request_id"] for e in audit.entries] == ["req-1", "req-2", "req-3"]


def test_login_with_mfa_returns_challenge(svc, token_repo, patient):
    patient.mfa_enabled = True
    result = svc.login("pat@example.com", "Secret123!")
    assert isinstance(result, MfaChallenge)
    assert result.user_id == patient.id
    assert token_repo.tokens == []


def test_refresh_issues_new_access_token(svc, patient):
    issued = svc.login("pat@example.com", "Secret123!")
    grant = svc.refresh(issued.refresh_token)
    payload = jwt_tokens.verify_access_token(grant.access_token)
    assert payload["sub"] == patient.id
    assert payload["role"] == "patient"


def test_refresh_rejects_access_token(svc, patient):
    issued = svc.login("pat@example.com", "Secret123!")
    with pytest.raises(APIException) as exc:
        svc.refresh(issued.access_token)
    assert exc.value.status_code == 401


def test_logout_revokes_refresh_token(svc, patient, audit):
    issued = svc.login("pat@example.com", "Secret123!")
    svc.logout(patient.id, refresh_token=issued.refresh_token)
    assert ("LOGOUT", "success") in audit.actions()
    with pytest.raises(APIException) as exc:
        svc.refresh(issued.refresh_token)
    assert exc.value.detail == "Invalid refresh token"


def test_refresh_rejected_for_deleted_user(svc, user_repo):
    user = user_repo.add(make_user(email="gone@example.com"))
    issued = svc.login("gone@example.com", "Secret123!")
    user.status = "deleted"
    with pytest.raises(APIException) as exc:
        svc.refresh(issued.refresh_token)
    assert exc.value.status_code == 401
