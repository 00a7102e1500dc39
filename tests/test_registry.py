import uuid

from bank import Bank
from deps.session import SessionRegistry


def _scope():
    return f"reg-{uuid.uuid4().hex[:8]}"


def test_same_bank_reuses_slot(bank):
    reg, scope = SessionRegistry(), _scope()
    assert reg.get(scope, bank) is reg.get(scope, bank)


def test_new_bank_replaces_session_but_keeps_lock(bank):
    reg, scope = SessionRegistry(), _scope()
    old = reg.get(scope, bank)

    reloaded = Bank(questions=dict(bank.questions), index=list(bank.index))
    new = reg.get(scope, reloaded)
    assert new.session is not old.session
    assert new.session.bank is reloaded
    assert new.lock is old.lock


def test_clear_keeps_scope_lock(bank):
    reg, scope = SessionRegistry(), _scope()
    old = reg.get(scope, bank)
    reg.clear()
    new = reg.get(scope, bank)
    assert new.session is not old.session
    assert new.lock is old.lock


def test_replacement_restores_saved_progress(bank):
    reg, scope = SessionRegistry(), _scope()
    slot = reg.get(scope, bank)
    with slot.lock:
        slot.session.submit("A")

    reg.clear()
    again = reg.get(scope, bank)
    assert again.session.submitted
    assert again.session.selected_option == "A"


def test_scopes_have_separate_locks(bank):
    reg = SessionRegistry()
    assert reg.get(_scope(), bank).lock is not reg.get(_scope(), bank).lock
