from dishka import Provider as DishkaProvider

from repocache.util.di.scope import Scope


class Provider(DishkaProvider):
    """Base for all repocache DI providers.

    Defaults unscoped ``provide`` declarations to the UOW scope so handlers
    get a fresh instance per request.
    """

    scope = Scope.UOW
