import os

# Must be set before anything under docare reads its settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "testing"
os.environ["JWT_SECRET_KEY"] = "test-access-secret-key-with-enough-length"
os.environ["JWT_REFRESH_SECRET_KEY"] = "test-refresh-secret-key-with-enough-length"
os.environ["ENCRYPTION_KEY"] = "00112233445566778899aabbccddeeff00112233445566778899aabbccddeeff"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_MAX_REQUESTS"] = "10000"
os.environ["AUTH_RATE_LIMIT_MAX_REQUESTS"] = "10000"
os.environ["LOG_LEVEL"] = "WARNING"

import uuid
from datetime import datetime
from typing import Dict, List, Optional, Tuple

import pytest

from docare.application.ports.appointments_repo import AppointmentQuery, AppointmentsRepository
from docare.application.ports.audit_logger import AuditLogger
from docare.application.ports.billing_repo import BillingRepository, TransactionQuery
from docare.application.ports.devices_repo import DevicesRepository
from docare.application.ports.medications_repo import MedicationsRepository
from docare.application.ports.messages_repo import MessagesRepository
from docare.application.ports.token_repo import RefreshTokenRepository
from docare.application.ports.user_repo import UserQuery, UserRepository
from docare.db.models.auth import RefreshToken
from docare.db.models.billing import Transaction
from docare.db.models.health import ACTIVE_APPOINTMENT_STATUSES, Appointment, Device, Medication
from docare.db.models.messaging import Message
from docare.db.models.users import User, UserProfile
from docare.infrastructure.security import passwords


class FakeUserRepo(UserRepository):
    def __init__(self):
        self.users: Dict[str, User] = {}
        self.profiles: Dict[str, UserProfile] = {}

    def get_by_id(self, user_id):
        return self.users.get(user_id)

    def get_by_email(self, email):
        for u in self.users.values():
            if u.email == email:
                return u
        return None

    def add(self, user, profile=None):
        self.users[user.id] = user
        if profile is not None:
            self.profiles[user.id] = profile
        return user

    def save(self, user):
        self.users[user.id] = user
        return user

    def get_profile(self, user_id):
        return self.profiles.get(user_id)

    def save_profile(self, profile):
        self.profiles[profile.user_id] = profile
        return profile

    def list_providers(self, specialty=None):
        out = []
        for u in self.users.values():
            if u.role != "provider" or not u.is_active:
                continue
            profile = self.profiles.get(u.id)
            if specialty and (not profile or profile.specialty != specialty):
                continue
            out.append((u, profile))
        return out

    def search(self, query: UserQuery) -> Tuple[List[User], int]:
        users = [u for u in self.users.values() if (not query.role or u.role == query.role)]
        return users[query.offset:query.offset + query.limit], len(users)

    def count(self, role=None, status=None, created_after=None):
        return len([u for u in self.users.values() if not role or u.role == role])

    def recent(self, limit=10):
        return list(self.users.values())[:limit]


class FakeTokenRepo(RefreshTokenRepository):
    def __init__(self):
        self.tokens: List[RefreshToken] = []

    def create(self, user_id, token_hash, expires_at, ip_address, user_agent):
        token = RefreshToken(user_id=user_id, token_hash=token_hash, expires_at=expires_at,
                             ip_address=ip_address, user_agent=user_agent)
        self.tokens.append(token)
        return token

    def get_active(self, user_id, token_hash):
        for t in self.tokens:
            if t.user_id == user_id and t.token_hash == token_hash and not t.is_revoked:
                return t
        return None

    def revoke(self, user_id, token_hash):
        token = self.get_active(user_id, token_hash)
        if not token:
            return False
        token.is_revoked = True
        token.revoked_at = datetime.utcnow()
        return True

    def revoke_all(self, user_id):
        count = 0
        for t in self.tokens:
            if t.user_id == user_id and not t.is_revoked:
                t.is_revoked = True
                count += 1
        return count


class RecordingAudit(AuditLogger):
    def __init__(self):
        self.entries = []

    def log(self, action, user_id=None, resource_type=None, resource_id=None, ip_address=None,
            user_agent=None, request_id=None, status="success", error_message=None, metadata=None):
        self.entries.append({
            "action": action,
            "user_id": user_id,
            "request_id": request_id,
            "status": status,
            "error_message": error_message,
            "metadata": metadata or {},
        })

    def actions(self):
        return [(e["action"], e["status"]) for e in self.entries]


class FakeAppointmentsRepo(AppointmentsRepository):
    def __init__(self):
        self.items: Dict[str, Appointment] = {}

    def get_by_id(self, appointment_id):
        return self.items.get(appointment_id)

    def find(self, query: AppointmentQuery):
        out = []
        for a in self.items.values():
            if query.patient_id and a.patient_id != query.patient_id:
                continue
            if query.provider_id and a.provider_id != query.provider_id:
                continue
            if query.status and a.status != query.status:
                continue
            out.append(a)
        return sorted(out, key=lambda a: a.scheduled_start)

    def find_conflict(self, provider_id, start, end, exclude_id=None):
        for a in self.items.values():
            if a.provider_id != provider_id or a.id == exclude_id:
                continue
            if a.status in ACTIVE_APPOINTMENT_STATUSES and a.scheduled_start < end and a.scheduled_end > start:
                return a
        return None

    def list_active_for_provider(self, provider_id, start, end):
        return [
            a for a in self.items.values()
            if a.provider_id == provider_id and a.status in ACTIVE_APPOINTMENT_STATUSES
            and a.scheduled_start < end and a.scheduled_end > start
        ]

    def add(self, appointment):
        self.items[appointment.id] = appointment
        return appointment

    def save(self, appointment):
        self.items[appointment.id] = appointment
        return appointment

    def count(self, status=None, start_from=None):
        return len([a for a in self.items.values() if not status or a.status == status])


class FakeMedicationsRepo(MedicationsRepository):
    def __init__(self):
        self.items: Dict[str, Medication] = {}

    def get_by_id(self, medication_id):
        return self.items.get(medication_id)

    def list_for_user(self, user_id, status=None):
        return [m for m in self.items.values() if m.user_id == user_id and (not status or m.status == status)]

    def add(self, medication):
        self.items[medication.id] = medication
        return medication

    def save(self, medication):
        self.items[medication.id] = medication
        return medication


class FakeMessagesRepo(MessagesRepository):
    def __init__(self):
        self.items: List[Message] = []
        self.saved = 0

    def get_by_id(self, message_id):
        return next((m for m in self.items if m.id == message_id), None)

    def list_for_participant(self, user_id):
        mine = [m for m in self.items if user_id in (m.sender_id, m.recipient_id)]
        return sorted(mine, key=lambda m: m.created_at, reverse=True)

    def list_thread(self, thread_id, user_id):
        mine = [m for m in self.items if m.thread_id == thread_id and user_id in (m.sender_id, m.recipient_id)]
        return sorted(mine, key=lambda m: m.created_at)

    def add(self, message):
        self.items.append(message)
        return message

    def save_all(self, messages):
        self.saved += len(messages)


class FakeBillingRepo(BillingRepository):
    def __init__(self):
        self.items: Dict[str, Transaction] = {}

    def get_by_id(self, transaction_id):
        return self.items.get(transaction_id)

    def find(self, query: TransactionQuery):
        return [t for t in self.items.values() if t.user_id == query.user_id and (not query.status or t.status == query.status)]

    def list_pending(self, user_id):
        return [t for t in self.items.values() if t.user_id == user_id and t.status == "pending"]

    def add(self, transaction):
        self.items[transaction.id] = transaction
        return transaction

    def total_completed_cents(self):
        return sum(t.amount_cents for t in self.items.values() if t.status == "completed")


class FakeDevicesRepo(DevicesRepository):
    def __init__(self):
        self.items: Dict[str, Device] = {}

    def get_for_user(self, device_id, user_id):
        device = self.items.get(device_id)
        return device if device and device.user_id == user_id else None

    def list_for_user(self, user_id):
        return [d for d in self.items.values() if d.user_id == user_id]

    def add(self, device):
        self.items[device.id] = device
        return device

    def save(self, device):
        self.items[device.id] = device
        return device

    def delete(self, device):
        self.items.pop(device.id, None)


def make_user(role: str = "patient", email: Optional[str] = None, password: str = "Secret123!", **fields) -> User:
    return User(
        email=email or f"{role}-{uuid.uuid4().hex[:8]}@example.com",
        password_hash=passwords.hash_password(password),
        name=fields.pop("name", role.title()),
        role=role,
        **fields,
    )


@pytest.fixture
def user_repo():
    return FakeUserRepo()


@pytest.fixture
def token_repo():
    return FakeTokenRepo()


@pytest.fixture
def audit():
    return RecordingAudit()


@pytest.fixture
def patient(user_repo):
    return user_repo.add(make_user("patient", email="pat@example.com", name="Pat Patient"))


@pytest.fixture
def provider(user_repo):
    user = user_repo.add(make_user("provider", email="doc@example.com", name="Dr. Doc"))
    user_repo.save_profile(UserProfile(user_id=user.id, specialty="cardiology"))
    return user
