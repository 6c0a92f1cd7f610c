import pytest

from artmarket.constants.message_status import (
    ALLOWED_PAYLOAD_STATUSES,
    REQUEST_PENDING,
    MessageStatus,
    PayloadStatus,
)


def test_allowed_pairs_include_the_asymmetric_ones():
    assert PayloadStatus(MessageStatus.REQUESTED, MessageStatus.REQUEST_WAITING_APPROVE) in ALLOWED_PAYLOAD_STATUSES
    assert PayloadStatus(MessageStatus.WAITING_REVIEW, MessageStatus.CHECK_DETAILS) in ALLOWED_PAYLOAD_STATUSES
    assert len(ALLOWED_PAYLOAD_STATUSES) == 12


def test_pair_outside_the_allowed_set_is_rejected():
    with pytest.raises(ValueError):
        PayloadStatus(MessageStatus.REQUESTED, MessageStatus.OPEN)
    with pytest.raises(ValueError):
        PayloadStatus.both(MessageStatus.CHECK_DETAILS)


def test_closed_is_the_only_terminal_literal():
    assert MessageStatus.CLOSED.value == "closed"
    assert "close" not in {s.value for s in MessageStatus}


def test_as_payload_uses_camel_case_keys():
    assert REQUEST_PENDING.as_payload() == {
        "senderStatus": "requested",
        "receiverStatus": "request_waiting_approve",
    }
