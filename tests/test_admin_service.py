import pytest

from docare.application.ports.audit_repo import AuditLogRepository
from docare.application.services.admin_service import AdminService
from docare.core.config import settings
from docare.exceptions import APIException

from conftest import FakeAppointmentsRepo, FakeBillingRepo, make_user


class FakeAuditRepo(AuditLogRepository):
    def search(self, query):
        return [], 0

    def recent(self, limit=10):
        return []


@pytest.fixture
def svc(user_repo, token_repo, audit):
    return AdminService(
        user_repo=user_repo,
        appointments_repo=FakeAppointmentsRepo(),
        billing_repo=FakeBillingRepo(),
        audit_repo=FakeAuditRepo(),
        token_repo=token_repo,
        audit=audit,
    )


@pytest.fixture
def admin(user_repo):
    return user_repo.add(make_user("super_admin", email="root@example.com"))


def test_dashboard_counts(svc, admin, patient, provider):
    metrics = svc.dashboard()["metrics"]
    assert metrics["total_users"] == 3
    assert metrics["total_patients"] == 1
    assert metrics["total_providers"] == 1
    assert metrics["total_revenue_cents"] == 0


def test_update_user_suspends_and_unlocks(svc, admin, patient, audit):
    patient.failed_login_attempts = 4
    updated = svc.update_user(admin, patient.id, {"status": "suspended", "unlock": True})
    assert updated.status == "suspended"
    assert updated.failed_login_attempts == 0
    assert updated.locked_until is None
    assert ("ADMIN_USER_UPDATE", "success") in audit.actions()


def test_other_super_admins_are_protected(svc, user_repo, admin):
    peer = user_repo.add(make_user("super_admin"))
    with pytest.raises(APIException) as exc:
        svc.update_user(admin, peer.id, {"status": "suspended"})
    assert exc.value.status_code == 403
    with pytest.raises(APIException) as exc:
        svc.delete_user(admin, peer.id)
    assert exc.value.status_code == 403


def test_delete_user_is_soft(svc, admin, patient, token_repo):
    token_repo.create(patient.id, "h1", patient.created_at, None, None)
    svc.delete_user(admin, patient.id)
    assert patient.status == "deleted"
    assert patient.email.startswith("deleted_")
    assert token_repo.tokens[0].is_revoked


def test_create_provider(svc, user_repo, admin, audit):
    provider = svc.create_provider(admin, {
        "email": "New.Doc@example.com",
        "password": "Provider123!",
        "name": "Dr. New",
        "specialty": "pediatrics",
    })
    assert provider.role == "provider"
    assert provider.email == "new.doc@example.com"
    assert user_repo.get_profile(provider.id).specialty == "pediatrics"
    assert ("ADMIN_PROVIDER_CREATE", "success") in audit.actions()

    with pytest.raises(APIException) as exc:
        svc.create_provider(admin, {"email": "new.doc@example.com", "password": "Provider123!", "name": "Dup"})
    assert exc.value.status_code == 409


def test_schedule_requires_provider(svc, patient, provider):
    assert svc.provider_schedule(provider.id) == []
    with pytest.raises(APIException) as exc:
        svc.provider_schedule(patient.id)
    assert exc.value.status_code == 404


def test_platform_settings(svc):
    cfg = svc.platform_settings()
    assert cfg["max_failed_login_attempts"] == 5
    assert cfg["clinic_hours"] == {"open": 9, "close": 17}


def test_update_settings_applies_and_audits(svc, admin, audit, monkeypatch):
    monkeypatch.setattr(settings, "MAX_APPOINTMENTS_PER_DAY", settings.MAX_APPOINTMENTS_PER_DAY)
    monkeypatch.setattr(settings, "CLINIC_CLOSE_HOUR", settings.CLINIC_CLOSE_HOUR)

    cfg = svc.update_settings(admin, {"max_appointments_per_day": 20, "clinic_close_hour": 18, "unknown": 1},
                              request_id="req-9")
    assert cfg["max_appointments_per_day"] == 20
    assert cfg["clinic_hours"] == {"open": 9, "close": 18}

    entry = audit.entries[-1]
    assert entry["action"] == "ADMIN_UPDATE_SETTINGS"
    assert entry["request_id"] == "req-9"
    assert entry["metadata"] == {"settings": {"max_appointments_per_day": 20, "clinic_close_hour": 18}}


def test_update_settings_rejects_inverted_clinic_hours(svc, admin, audit):
    with pytest.raises(APIException) as exc:
        svc.update_settings(admin, {"clinic_open_hour": 18})
    assert exc.value.status_code == 400
    assert settings.CLINIC_OPEN_HOUR == 9
    assert audit.entries == []


def test_system_health(svc):
    health = svc.system_health(database_ok=True)
    assert health["status"] == "healthy"
    assert health["database"] == "connected"
    assert health["uptime_seconds"] >= 0
    assert health["python_version"]

    assert svc.system_health(database_ok=False)["database"] == "disconnected"
