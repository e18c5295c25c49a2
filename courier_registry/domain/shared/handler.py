"""Command/query handler and service base classes.

Handlers and services declare their collaborators as annotated class attributes
and are turned into dataclasses automatically, so dishka can build them from
their ``__init__`` signature:

    class DeleteRegistrationHandler(CommandHandler[DeleteRegistration, RegistrationDeleted]):
        registry_service: RegistryService

        async def run(self, cmd: DeleteRegistration) -> RegistrationDeleted: ...
"""

from abc import ABCMeta, abstractmethod
from dataclasses import dataclass
from typing import Generic, TypeVar, dataclass_transform

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Command(BaseModel): ...


class Query(BaseModel): ...


class Result(BaseModel):
    """Handler output. Serialized with lowerCamelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


C = TypeVar("C", bound=Command)
Q = TypeVar("Q", bound=Query)
R = TypeVar("R", bound=Result)


@dataclass_transform()
class _DataclassMeta(ABCMeta):
    """Metaclass that combines ABC with auto-dataclass for subclasses."""

    def __new__(mcs, name: str, bases: tuple[type, ...], namespace: dict):
        cls = super().__new__(mcs, name, bases, namespace)
        if any(isinstance(b, mcs) for b in bases):
            return dataclass(cls)
        return cls


class CommandHandler(Generic[C, R], metaclass=_DataclassMeta):
    """Base class for command handlers. Subclasses are automatically dataclasses."""

    @abstractmethod
    async def run(self, cmd: C) -> R: ...


class QueryHandler(Generic[Q, R], metaclass=_DataclassMeta):
    """Base class for query handlers. Subclasses are automatically dataclasses."""

    @abstractmethod
    async def run(self, query: Q) -> R: ...


class Service(metaclass=_DataclassMeta):
    """Base class for domain services. Subclasses are automatically dataclasses."""
