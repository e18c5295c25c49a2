"""Dishka scopes and provider base for the registry.

Two scopes, APP -> UOW. APP lives as long as the process and holds config,
the engine, the probe client and the refresh pool. UOW lives for one HTTP
request or one detached refresh task and holds the session, repositories,
services and handlers.
"""

from dishka import BaseScope, new_scope
from dishka import Provider as DishkaProvider


class Scope(BaseScope):  # type: ignore[misc]  # BaseScope is designed to be subclassed
    APP = new_scope("APP")
    UOW = new_scope("UOW")


class Provider(DishkaProvider):
    """Base for all registry DI providers. Factories default to the APP scope."""

    scope = Scope.APP
