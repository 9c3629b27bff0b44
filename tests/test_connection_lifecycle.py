"""
Tests for ConnectionLifecycleManager against the in-memory store.
"""
import pytest

from campus_connect.core.connection_lifecycle import ConnectionLifecycleManager
from campus_connect.core.exceptions import (
    ConnectionAlreadyExistsError,
    ConnectionNotFoundError,
    InvalidArgumentError,
    UnauthorizedError,
)
from campus_connect.schemas.enums import (
    ConnectionDecisionEnum,
    ConnectionFilterEnum,
    ConnectionRoleEnum,
    ConnectionStatusEnum,
)


class TestRequestConnection:

    def test_creates_pending_request(self, manager, store, alice):
        result = manager.request_connection(alice, "bob", "hello")

        assert result.created is True
        record = store.get_connection(result.connection_id)
        assert record['requester_id'] == "alice"
        assert record['receiver_id'] == "bob"
        assert record['status'] == ConnectionStatusEnum.PENDING.value
        assert record['message'] == "hello"

    def test_repeat_request_is_a_no_op(self, manager, store, alice, pending_request):
        result = manager.request_connection(alice, "bob")

        assert result.created is False
        assert result.connection_id == pending_request
        assert len(store.connections) == 1

    def test_reverse_request_returns_existing(self, manager, store, bob, pending_request):
        result = manager.request_connection(bob, "alice")

        assert result.created is False
        assert result.connection_id == pending_request
        assert len(store.connections) == 1
        # The original direction is kept
        assert store.get_connection(pending_request)['requester_id'] == "alice"

    def test_request_when_already_connected(self, manager, store, bob, accepted_connection):
        result = manager.request_connection(bob, "alice")

        assert result.created is False
        assert result.connection_id == accepted_connection
        assert store.get_connection(accepted_connection)['status'] == ConnectionStatusEnum.ACCEPTED.value

    def test_self_request_rejected(self, manager, store, alice):
        with pytest.raises(InvalidArgumentError):
            manager.request_connection(alice, "alice")
        assert store.connections == {}

    def test_empty_target_rejected(self, manager, alice):
        with pytest.raises(InvalidArgumentError):
            manager.request_connection(alice, "")

    def test_unknown_target_rejected(self, manager, store, alice):
        with pytest.raises(InvalidArgumentError):
            manager.request_connection(alice, "nobody")
        assert store.connections == {}

    def test_unapproved_target_rejected(self, manager, alice):
        with pytest.raises(InvalidArgumentError):
            manager.request_connection(alice, "dave")

    def test_unauthenticated_caller(self, manager, store, anonymous):
        with pytest.raises(UnauthorizedError):
            manager.request_connection(anonymous, "bob")
        assert store.connections == {}

    def test_lost_race_reports_existing(self, store, users, alice):
        # The pair is linked after find_between looked but before the insert
        class RacingStore(type(store)):
            def find_between(self, user_a, user_b):
                return None

        racing = RacingStore()
        other = racing.insert_connection("bob", "alice")
        manager = ConnectionLifecycleManager(store=racing, users=users)

        result = manager.request_connection(alice, "bob")

        assert result.created is False
        assert result.connection_id == other['connection_id']
        assert len(racing.connections) == 1

    def test_store_conflict_without_id_is_reraised_when_nothing_found(self, users, alice):
        class ConflictingStore:
            def find_between(self, user_a, user_b):
                return None

            def insert_connection(self, requester_id, receiver_id, message=None):
                raise ConnectionAlreadyExistsError()

        manager = ConnectionLifecycleManager(store=ConflictingStore(), users=users)
        with pytest.raises(ConnectionAlreadyExistsError):
            manager.request_connection(alice, "bob")


class TestRespondToConnection:

    def test_receiver_accepts(self, manager, store, bob, pending_request):
        connection = manager.respond_to_connection(bob, pending_request, ConnectionDecisionEnum.ACCEPT)

        assert connection['status'] == ConnectionStatusEnum.ACCEPTED.value
        assert store.get_connection(pending_request)['status'] == ConnectionStatusEnum.ACCEPTED.value

    def test_receiver_rejects_and_row_is_gone(self, manager, store, bob, pending_request):
        assert manager.respond_to_connection(bob, pending_request, "reject") is None

        assert store.get_connection(pending_request) is None
        assert store.find_between("alice", "bob") is None

    def test_requester_cannot_respond(self, manager, store, alice, pending_request):
        with pytest.raises(ConnectionNotFoundError):
            manager.respond_to_connection(alice, pending_request, "accept")
        assert store.get_connection(pending_request)['status'] == ConnectionStatusEnum.PENDING.value

    def test_third_party_cannot_respond(self, manager, store, carol, pending_request):
        with pytest.raises(ConnectionNotFoundError):
            manager.respond_to_connection(carol, pending_request, "reject")
        assert store.get_connection(pending_request) is not None

    def test_missing_connection(self, manager, bob):
        with pytest.raises(ConnectionNotFoundError):
            manager.respond_to_connection(bob, "does-not-exist", "accept")

    def test_already_accepted_cannot_be_answered_again(self, manager, store, bob, accepted_connection):
        with pytest.raises(ConnectionNotFoundError):
            manager.respond_to_connection(bob, accepted_connection, "reject")
        assert store.get_connection(accepted_connection)['status'] == ConnectionStatusEnum.ACCEPTED.value

    def test_respond_after_reject(self, manager, bob, pending_request):
        manager.respond_to_connection(bob, pending_request, "reject")
        with pytest.raises(ConnectionNotFoundError):
            manager.respond_to_connection(bob, pending_request, "accept")

    def test_invalid_decision(self, manager, store, bob, pending_request):
        with pytest.raises(InvalidArgumentError):
            manager.respond_to_connection(bob, pending_request, "maybe")
        assert store.get_connection(pending_request)['status'] == ConnectionStatusEnum.PENDING.value

    def test_unauthenticated_caller(self, manager, anonymous, pending_request):
        with pytest.raises(UnauthorizedError):
            manager.respond_to_connection(anonymous, pending_request, "accept")

    def test_concurrent_writer_wins(self, manager, store, bob, pending_request):
        # Another response lands between the manager's read and its write
        original_update = store.update_connection_status

        def update_after_reject(connection_id, status, expected_status=ConnectionStatusEnum.PENDING):
            store.delete_connection(connection_id)
            return original_update(connection_id, status, expected_status=expected_status)

        store.update_connection_status = update_after_reject
        with pytest.raises(ConnectionNotFoundError):
            manager.respond_to_connection(bob, pending_request, "accept")
        assert store.connections == {}

    def test_new_request_allowed_after_reject(self, manager, store, alice, bob, pending_request):
        manager.respond_to_connection(bob, pending_request, "reject")

        result = manager.request_connection(bob, "alice")

        assert result.created is True
        assert result.connection_id != pending_request
        assert store.get_connection(result.connection_id)['requester_id'] == "bob"


class TestRemoveConnection:

    @pytest.mark.parametrize("who", ["alice", "bob"])
    def test_either_participant_may_remove(self, manager, store, make_caller, accepted_connection, who):
        manager.remove_connection(make_caller(who), accepted_connection)

        assert store.get_connection(accepted_connection) is None
        assert store.find_between("alice", "bob") is None

    def test_third_party_cannot_remove(self, manager, store, carol, accepted_connection):
        with pytest.raises(ConnectionNotFoundError):
            manager.remove_connection(carol, accepted_connection)
        assert store.get_connection(accepted_connection) is not None

    def test_pending_request_cannot_be_removed(self, manager, store, alice, pending_request):
        with pytest.raises(ConnectionNotFoundError):
            manager.remove_connection(alice, pending_request)
        assert store.get_connection(pending_request) is not None

    def test_missing_connection(self, manager, alice):
        with pytest.raises(ConnectionNotFoundError):
            manager.remove_connection(alice, "does-not-exist")

    def test_unauthenticated_caller(self, manager, anonymous, accepted_connection):
        with pytest.raises(UnauthorizedError):
            manager.remove_connection(anonymous, accepted_connection)


class TestListConnections:

    def test_roles_from_each_side(self, manager, alice, bob, pending_request):
        [sent] = manager.list_connections(alice)
        [received] = manager.list_connections(bob)

        assert sent['role'] == ConnectionRoleEnum.SENT
        assert received['role'] == ConnectionRoleEnum.RECEIVED
        assert sent['connection_id'] == received['connection_id'] == pending_request

    def test_accepted_is_connected_for_both(self, manager, alice, bob, accepted_connection):
        assert manager.list_connections(alice)[0]['role'] == ConnectionRoleEnum.CONNECTED
        assert manager.list_connections(bob)[0]['role'] == ConnectionRoleEnum.CONNECTED

    def test_newest_first(self, manager, alice, carol):
        first = manager.request_connection(alice, "bob").connection_id
        second = manager.request_connection(carol, "alice").connection_id

        listed = [c['connection_id'] for c in manager.list_connections(alice)]

        assert listed == [second, first]

    def test_filter_by_status(self, manager, alice, bob, carol):
        pending = manager.request_connection(alice, "carol").connection_id
        accepted = manager.request_connection(alice, "bob").connection_id
        manager.respond_to_connection(bob, accepted, "accept")

        assert [c['connection_id'] for c in manager.list_connections(alice, ConnectionFilterEnum.PENDING)] == [pending]
        assert [c['connection_id'] for c in manager.list_connections(alice, "accepted")] == [accepted]
        assert len(manager.list_connections(alice, ConnectionFilterEnum.ALL)) == 2

    def test_only_own_connections(self, manager, carol, pending_request):
        assert manager.list_connections(carol) == []

    def test_returns_copies(self, manager, store, alice, pending_request):
        listed = manager.list_connections(alice)
        listed[0]['status'] = "tampered"

        assert store.get_connection(pending_request)['status'] == ConnectionStatusEnum.PENDING.value
        assert 'role' not in store.connections[pending_request]

    def test_missing_timestamp_sorts_last(self, manager, store, alice, carol):
        first = manager.request_connection(alice, "bob").connection_id
        second = manager.request_connection(carol, "alice").connection_id
        # A server timestamp that has not resolved yet
        store.connections[second]['created_at'] = None

        listed = [c['connection_id'] for c in manager.list_connections(alice)]

        assert listed == [first, second]

    def test_unauthenticated_caller(self, manager, anonymous):
        with pytest.raises(UnauthorizedError):
            manager.list_connections(anonymous)


class TestAreConnected:

    def test_pending_is_not_connected(self, manager, pending_request):
        assert manager.are_connected("alice", "bob") is False

    def test_accepted_is_connected_both_ways(self, manager, accepted_connection):
        assert manager.are_connected("alice", "bob") is True
        assert manager.are_connected("bob", "alice") is True

    def test_strangers(self, manager):
        assert manager.are_connected("alice", "carol") is False


def test_full_lifecycle(manager, store, alice, bob):
    """Request, duplicate, accept, remove, and request again."""
    first = manager.request_connection(alice, "bob", "hi")
    assert first.created is True

    duplicate = manager.request_connection(bob, "alice")
    assert duplicate == type(first)(connection_id=first.connection_id, created=False)

    with pytest.raises(ConnectionNotFoundError):
        manager.respond_to_connection(alice, first.connection_id, "accept")

    accepted = manager.respond_to_connection(bob, first.connection_id, "accept")
    assert accepted['status'] == ConnectionStatusEnum.ACCEPTED.value
    assert manager.list_connections(alice)[0]['role'] == ConnectionRoleEnum.CONNECTED

    manager.remove_connection(alice, first.connection_id)
    assert manager.list_connections(bob) == []

    again = manager.request_connection(bob, "alice")
    assert again.created is True
    assert len(store.connections) == 1
