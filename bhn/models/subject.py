"""
Tagged subject references.

Documents and notifications can point at one clinical record through one of
several nullable foreign keys. ``SubjectReference`` names that record as a
(kind, id) pair so the "at most one subject" rule can be checked in one place.
"""
import uuid
from enum import Enum
from typing import ClassVar, Dict, List, Optional

from pydantic import BaseModel

from bhn.core.exceptions import SubjectConflict


class SubjectKind(str, Enum):
    """Record kinds a document or notification can refer to"""

    PATIENT = "patient"
    HEALTH_RECORD = "health_record"
    BIRTH_REGISTRATION = "birth_registration"
    APPOINTMENT = "appointment"


class SubjectReference(BaseModel):
    """The single record a document or notification is about."""

    kind: SubjectKind
    id: uuid.UUID

    model_config = {"frozen": True}


class SubjectReferenceMixin:
    """
    Expose several nullable foreign keys as one optional subject.

    Subclasses map each supported kind to the column holding its id::

        __subject_columns__ = {
            SubjectKind.PATIENT: "patient_id",
            SubjectKind.HEALTH_RECORD: "health_record_id",
        }
    """

    __subject_columns__: ClassVar[Dict[SubjectKind, str]] = {}

    def _set_subject_columns(self) -> List[SubjectKind]:
        return [
            kind
            for kind, column in self.__subject_columns__.items()
            if getattr(self, column, None) is not None
        ]

    def check_subject(self) -> None:
        """
        Raise SubjectConflict if more than one subject column is populated.
        """
        kinds = self._set_subject_columns()
        if len(kinds) > 1:
            raise SubjectConflict(
                f"{self.__tablename__} row references more than one subject: "
                f"{', '.join(kind.value for kind in kinds)}",
                table=self.__tablename__,
            )

    @property
    def subject(self) -> Optional[SubjectReference]:
        self.check_subject()
        kinds = self._set_subject_columns()
        if not kinds:
            return None
        kind = kinds[0]
        return SubjectReference(
            kind=kind, id=getattr(self, self.__subject_columns__[kind])
        )

    @subject.setter
    def subject(self, reference: Optional[SubjectReference]) -> None:
        if reference is not None and reference.kind not in self.__subject_columns__:
            raise SubjectConflict(
                f"{self.__tablename__} cannot reference a {reference.kind.value}",
                table=self.__tablename__,
            )
        for kind, column in self.__subject_columns__.items():
            if reference is not None and kind == reference.kind:
                setattr(self, column, reference.id)
            else:
                setattr(self, column, None)
