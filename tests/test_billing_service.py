import pytest

from docare.application.services.billing_service import BillingService
from docare.exceptions import APIException

from conftest import FakeBillingRepo


@pytest.fixture
def repo():
    return FakeBillingRepo()


@pytest.fixture
def svc(repo, user_repo):
    return BillingService(repo=repo, user_repo=user_repo)


def _txn(amount_cents=2500, **overrides):
    data = {"amount_cents": amount_cents, "type": "consultation", "payment_method": "card"}
    data.update(overrides)
    return data


def test_create_transaction_is_pending(svc, patient):
    txn = svc.create_transaction(patient.id, _txn(metadata={"ref": "abc"}))
    assert txn.status == "pending"
    assert txn.currency == "USD"
    assert txn.meta == {"ref": "abc"}


def test_negative_amount_rejected(svc, patient):
    with pytest.raises(APIException) as exc:
        svc.create_transaction(patient.id, _txn(-1))
    assert exc.value.status_code == 400


def test_balance_sums_pending_only(svc, patient):
    svc.create_transaction(patient.id, _txn(2500))
    svc.create_transaction(patient.id, _txn(1050))
    paid = svc.create_transaction(patient.id, _txn(9999))
    paid.status = "completed"

    balance = svc.balance(patient.id)
    assert balance["balance_cents"] == 3550
    assert balance["balance_display"] == "$35.50"
    assert balance["pending_count"] == 2


def test_empty_balance(svc, patient):
    assert svc.balance(patient.id) == {
        "balance_cents": 0,
        "balance_display": "$0.00",
        "currency": "USD",
        "pending_count": 0,
    }


def test_receipt_for_owner(svc, patient):
    txn = svc.create_transaction(patient.id, _txn(12345, description="Video visit"))
    receipt = svc.receipt(patient.id, txn.id)
    assert receipt["amount"] == "$123.45"
    assert receipt["patient_name"] == "Pat Patient"
    assert receipt["description"] == "Video visit"


def test_receipt_hidden_from_other_users(svc, patient, provider):
    txn = svc.create_transaction(patient.id, _txn())
    with pytest.raises(APIException) as exc:
        svc.receipt(provider.id, txn.id)
    assert exc.value.status_code == 404
