"""Profiling support for singlecopy using cProfile.

When the SINGLECOPY_PROFILE environment variable is set to a directory path,
profiling data will be collected and saved to a per-run session subdirectory
with unique filenames containing the process PID and a sequence number.
"""
import cProfile
import functools
import itertools
import os
import time
from pathlib import Path
from typing import Callable, TypeVar, ParamSpec

P = ParamSpec('P')
T = TypeVar('T')

# Global counter for generating unique sequence numbers within the same process
_profile_counter = itertools.count()


def get_profile_dir(session_dir: str | None = None) -> Path | None:
    """Get the profile directory from environment variable.

    Args:
        session_dir: Session subdirectory name; a new one is generated if None

    Returns:
        Path to profile directory if SINGLECOPY_PROFILE is set, None otherwise.
        The path includes a subdirectory for the session with format
        {timestamp}_{pid} (e.g., "1730332456789_54321")
    """
    profile_path = os.environ.get('SINGLECOPY_PROFILE')
    if profile_path:
        return Path(profile_path) / (session_dir or new_session_dir_name())
    return None


def new_session_dir_name() -> str:
    timestamp_ms = int(time.time() * 1000)
    return f"{timestamp_ms}_{os.getpid()}"


def generate_profile_filename(prefix: str = "profile") -> str:
    """Generate a unique profile filename like "main_54398_0.prof"."""
    current_pid = os.getpid()
    seq = next(_profile_counter)

    return f"{prefix}_{current_pid}_{seq}.prof"


def profile_function(func: Callable[P, T], prefix: str = "profile",
                     session_dir: str | None = None) -> Callable[P, T]:
    """Decorator/wrapper to profile a function if SINGLECOPY_PROFILE is set.

    Args:
        func: Function to profile
        prefix: Prefix for the profile filename
        session_dir: Session subdirectory to write into; a new one per call if None

    Returns:
        Wrapped function that profiles if environment variable is set
    """
    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
        profile_dir = get_profile_dir(session_dir)

        if profile_dir is None:
            return func(*args, **kwargs)

        profile_dir.mkdir(parents=True, exist_ok=True)
        profile_file = profile_dir / generate_profile_filename(prefix)

        profiler = cProfile.Profile()
        try:
            profiler.enable()
            return func(*args, **kwargs)
        finally:
            profiler.disable()
            profiler.dump_stats(str(profile_file))

    return wrapper


def profile_main(func: Callable[P, T]) -> Callable[P, T]:
    """Decorator for the main entry point function.

    Each invocation profiles into its own session directory with prefix="main".
    """
    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
        profiled_func = profile_function(func, prefix="main", session_dir=new_session_dir_name())
        return profiled_func(*args, **kwargs)

    return wrapper
