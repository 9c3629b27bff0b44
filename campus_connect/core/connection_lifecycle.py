"""
Connection lifecycle between two users.

A connection starts ``pending`` when one user asks another; only the receiver
may accept it (``accepted``) or reject it (the row is deleted). Either side may
later remove an accepted connection (the row is deleted). There is never more
than one row per pair of users.

The manager holds no state of its own. The relationship store and the user
directory are passed in, and the caller identity is passed to every operation.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

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

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class CallerIdentity:
    user_id: Optional[str]
    is_authenticated: bool


@dataclass(frozen=True)
class ConnectionRequestResult:
    connection_id: str
    created: bool


class ConnectionLifecycleManager:

    def __init__(self, store, users):
        self.store = store
        self.users = users

    # --- helpers ---

    @staticmethod
    def _require_caller(caller: CallerIdentity) -> str:
        if caller is None or not caller.is_authenticated or not caller.user_id:
            raise UnauthorizedError()
        return caller.user_id

    @staticmethod
    def _role_for(connection: dict, user_id: str) -> ConnectionRoleEnum:
        if connection['status'] == ConnectionStatusEnum.ACCEPTED.value:
            return ConnectionRoleEnum.CONNECTED
        if connection['requester_id'] == user_id:
            return ConnectionRoleEnum.SENT
        return ConnectionRoleEnum.RECEIVED

    @staticmethod
    def _sort_key(connection: dict) -> datetime:
        created_at = connection.get('created_at')
        if not isinstance(created_at, datetime):
            return _EPOCH
        if created_at.tzinfo is None:
            return created_at.replace(tzinfo=timezone.utc)
        return created_at

    # --- operations ---

    def request_connection(
        self, caller: CallerIdentity, target_id: str, message: Optional[str] = None
    ) -> ConnectionRequestResult:
        """
        Sends a connection request from the caller to target_id.

        If the two users already share a connection in either direction nothing
        is written and the existing id comes back with ``created=False``.
        """
        caller_id = self._require_caller(caller)
        if not target_id:
            raise InvalidArgumentError("A target user is required.")
        if target_id == caller_id:
            raise InvalidArgumentError("Cannot connect with yourself.")

        target = self.users.get_user_by_id(target_id)
        if not target or not target.get('is_approved'):
            raise InvalidArgumentError("Target user not found.", details={"user_id": target_id})

        existing = self.store.find_between(caller_id, target_id)
        if existing:
            logger.info(f"request_connection: {caller_id} -> {target_id} already linked by {existing['connection_id']}")
            return ConnectionRequestResult(connection_id=existing['connection_id'], created=False)

        try:
            connection = self.store.insert_connection(caller_id, target_id, message)
        except ConnectionAlreadyExistsError as e:
            # Another request for the same pair committed between our check and insert
            logger.info(f"request_connection: {caller_id} -> {target_id} raced with {e.connection_id}")
            if e.connection_id is None:
                existing = self.store.find_between(caller_id, target_id)
                if not existing:
                    raise
                return ConnectionRequestResult(connection_id=existing['connection_id'], created=False)
            return ConnectionRequestResult(connection_id=e.connection_id, created=False)

        logger.info(f"request_connection: {caller_id} -> {target_id} created {connection['connection_id']}")
        return ConnectionRequestResult(connection_id=connection['connection_id'], created=True)

    def respond_to_connection(
        self, caller: CallerIdentity, connection_id: str, decision: ConnectionDecisionEnum
    ) -> Optional[dict]:
        """
        Accepts or rejects a pending request addressed to the caller.

        Returns the accepted connection, or None after a rejection.
        """
        caller_id = self._require_caller(caller)
        try:
            decision = ConnectionDecisionEnum(decision)
        except ValueError:
            raise InvalidArgumentError('Invalid action. Must be "accept" or "reject"')

        connection = self.store.get_connection(connection_id) if connection_id else None
        if (
            not connection
            or connection['receiver_id'] != caller_id
            or connection['status'] != ConnectionStatusEnum.PENDING.value
        ):
            logger.warning(f"respond_to_connection: no pending request {connection_id} for {caller_id}")
            raise ConnectionNotFoundError(connection_id)

        if decision == ConnectionDecisionEnum.ACCEPT:
            updated = self.store.update_connection_status(
                connection_id,
                ConnectionStatusEnum.ACCEPTED,
                expected_status=ConnectionStatusEnum.PENDING,
            )
            logger.info(f"respond_to_connection: {caller_id} accepted {connection_id}")
            return updated

        self.store.delete_connection(connection_id, expected_status=ConnectionStatusEnum.PENDING)
        logger.info(f"respond_to_connection: {caller_id} rejected {connection_id}")
        return None

    def remove_connection(self, caller: CallerIdentity, connection_id: str) -> None:
        """Removes an accepted connection; either participant may do this."""
        caller_id = self._require_caller(caller)
        connection = self.store.get_connection(connection_id) if connection_id else None
        if (
            not connection
            or connection['status'] != ConnectionStatusEnum.ACCEPTED.value
            or caller_id not in (connection['requester_id'], connection['receiver_id'])
        ):
            logger.warning(f"remove_connection: no accepted connection {connection_id} for {caller_id}")
            raise ConnectionNotFoundError(connection_id)

        self.store.delete_connection(connection_id, expected_status=ConnectionStatusEnum.ACCEPTED)
        logger.info(f"remove_connection: {caller_id} removed {connection_id}")

    def list_connections(
        self, caller: CallerIdentity, filter: ConnectionFilterEnum = ConnectionFilterEnum.ALL
    ) -> List[dict]:
        """
        Lists the caller's connections, newest first, each tagged with a 'role'
        of sent, received or connected.
        """
        caller_id = self._require_caller(caller)
        filter = ConnectionFilterEnum(filter or ConnectionFilterEnum.ALL)

        connections = []
        for connection in self.store.list_for_participant(caller_id):
            if filter != ConnectionFilterEnum.ALL and connection['status'] != filter.value:
                continue
            item = dict(connection)
            item['role'] = self._role_for(connection, caller_id)
            connections.append(item)

        connections.sort(key=self._sort_key, reverse=True)
        return connections

    def are_connected(self, user_a: str, user_b: str) -> bool:
        connection = self.store.find_between(user_a, user_b)
        return bool(connection) and connection['status'] == ConnectionStatusEnum.ACCEPTED.value


def get_connection_manager() -> ConnectionLifecycleManager:
    # Deferred so this module imports without a Firestore client
    from campus_connect.services.firestore_services import connection_service, user_service
    return ConnectionLifecycleManager(store=connection_service, users=user_service)
