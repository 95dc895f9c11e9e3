from __future__ import annotations

import pytest

from ticket_gate.config import GateConfig
from ticket_gate.errors import PolicyViolationError, TicketStateError
from ticket_gate.models import ForeignRepo, Jira, LocalRepo, Ticket
from ticket_gate.policy import PolicyGate


def _ticket(status: str, board=None, ticket_id: str = "57") -> Ticket:
    ticket = Ticket(board or ForeignRepo("db-beaver", "core"), ticket_id, "https://tracker/issue")
    ticket.record_status(status)
    return ticket


@pytest.mark.parametrize("status", ["closed", "done"])
def test_rejected_statuses_fail(status: str) -> None:
    verdict = PolicyGate(GateConfig()).evaluate(_ticket(status))

    assert not verdict.passed
    assert isinstance(verdict.error, PolicyViolationError)
    assert verdict.reason == f"Ticket db-beaver/core 57 has status: {status}."


@pytest.mark.parametrize("status", ["open", "In Progress", "Closed", "Done", "DONE", ""])
def test_other_statuses_pass_case_sensitively(status: str) -> None:
    # "Closed" and "Done" are not rejected unless case-insensitive matching is enabled.
    verdict = PolicyGate(GateConfig()).evaluate(_ticket(status))

    assert verdict.passed
    assert verdict.error is None


@pytest.mark.parametrize("status", ["Closed", "Done", "DONE", "closed"])
def test_case_insensitive_switch_rejects_cased_variants(status: str) -> None:
    gate = PolicyGate(GateConfig(case_insensitive_statuses=True))

    assert not gate.evaluate(_ticket(status, board=Jira(), ticket_id="CB-1")).passed


def test_rejected_set_is_configurable() -> None:
    gate = PolicyGate(GateConfig(rejected_statuses=frozenset({"Resolved"})))

    assert not gate.evaluate(_ticket("Resolved")).passed
    assert gate.evaluate(_ticket("closed")).passed


def test_local_ticket_reason_names_current_repo() -> None:
    verdict = PolicyGate(GateConfig(), current_repo="dbeaver/dbeaver").evaluate(
        _ticket("closed", board=LocalRepo(), ticket_id="42")
    )

    assert verdict.reason == "Ticket dbeaver/dbeaver 42 has status: closed."
    assert verdict.ticket is not None and verdict.ticket.id == "42"


def test_unfetched_ticket_cannot_be_evaluated() -> None:
    ticket = Ticket(LocalRepo(), "1", "https://tracker/1")

    with pytest.raises(TicketStateError):
        PolicyGate().evaluate(ticket)
