from typing import Annotated

from fastapi import Depends

from compass.config import get_settings
from compass.engine_config import EngineConfig, get_engine_config
from compass.services.clock import Clock, SystemClock


def get_clock() -> Clock:
    """
    Dependency that supplies "now" for a request.

    Calendar boundaries follow the configured default timezone. Tests
    override this with a FixedClock.
    """
    return SystemClock(get_settings().timezone)


# Type aliases for cleaner dependency injection
EngineClock = Annotated[Clock, Depends(get_clock)]
EngineSettings = Annotated[EngineConfig, Depends(get_engine_config)]
