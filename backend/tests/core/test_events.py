"""Registry Events - payload shapes and outbox ordering."""

from land_registry.core.domain_types import RegistryEventType
from land_registry.core.events import (
    EncumbranceUpdated,
    EventOutbox,
    MutationStatusUpdated,
    PropertyRegistered,
    PropertyTransferred,
)


def test_event_types_are_class_level():
    assert PropertyRegistered(plot_id=1, owner="a").event_type is (
        RegistryEventType.PROPERTY_REGISTERED
    )
    assert MutationStatusUpdated(plot_id=1, status=True).event_type is (
        RegistryEventType.MUTATION_STATUS_UPDATED
    )


def test_registered_payload():
    assert PropertyRegistered(plot_id=1, owner="alice").to_payload() == {
        "plot_id": 1, "owner": "alice",
    }


def test_transferred_payload_uses_from_to_keys():
    event = PropertyTransferred(plot_id=1, from_owner="alice", to_owner="bob", price=2000)
    assert event.to_payload() == {
        "plot_id": 1, "from": "alice", "to": "bob", "price": 2000,
    }


def test_encumbrance_payload():
    assert EncumbranceUpdated(plot_id=4, status=True).to_payload() == {
        "plot_id": 4, "status": True,
    }


def test_outbox_preserves_order_and_drains():
    outbox = EventOutbox()
    first = PropertyRegistered(plot_id=1, owner="alice")
    second = EncumbranceUpdated(plot_id=1, status=True)
    outbox.publish(first)
    outbox.publish(second)
    assert len(outbox) == 2
    assert outbox.drain() == [first, second]
    assert len(outbox) == 0
    assert outbox.drain() == []
