from fastapi import APIRouter

from app.types.factory import Factory


class CoreModule:
    """
    Group of endpoints declared by a `app/core/<name>/endpoints_<name>.py` file, in a `core_module` variable.

    :param root: name of the module
    :param tag: OpenAPI tag of the endpoints
    :param factory: demo data creator, used when `USE_FACTORIES` is enabled
    :param router: endpoints of the module, an empty router is created if omitted
    """

    def __init__(
        self,
        root: str,
        tag: str,
        factory: Factory | None,
        router: APIRouter | None = None,
    ):
        self.root = root
        self.factory = factory
        self.router = router if router is not None else APIRouter(tags=[tag])


class Module(CoreModule):
    """
    Same as a CoreModule, for `app/modules/<name>/endpoints_<name>.py` files declaring a `module` variable.
    """
