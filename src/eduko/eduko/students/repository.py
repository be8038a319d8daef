from __future__ import annotations

from typing import Optional, Protocol

from .model import NewStudentAccount, Student


class StudentRepository(Protocol):
    def create_with_user(self, *, school_id: int, account: NewStudentAccount) -> Student:
        """Insert the users row (role student) and the students row in one transaction.

        Raises DuplicateUsernameError when the username is taken in the school.
        """

        raise NotImplementedError

    def get_by_id(self, *, school_id: int, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def get_by_user_id(self, *, school_id: int, user_id: int) -> Optional[Student]:
        raise NotImplementedError
