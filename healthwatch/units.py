"""Human-readable formatting of clock speeds, byte counts and uptimes."""

_BINARY_PREFIXES = "KMGTPE"
_STEP = 1024


def format_clock_speed(clock_speed: float) -> str:
    """Format a clock speed given in GHz with two decimals."""
    return f"{clock_speed:.2f} GHz"


def format_bytes_short(num_bytes: int) -> str:
    """Format a byte count with binary prefixes and one decimal, e.g. ``1.5 KB``."""
    if num_bytes < 0:
        raise ValueError(f"byte count must not be negative: {num_bytes}")
    if num_bytes < _STEP:
        return f"{num_bytes} B"
    divisor, exponent = _STEP, 0
    remaining = num_bytes // _STEP
    while remaining >= _STEP and exponent < len(_BINARY_PREFIXES) - 1:
        divisor *= _STEP
        exponent += 1
        remaining //= _STEP
    return f"{num_bytes / divisor:.1f} {_BINARY_PREFIXES[exponent]}B"


def format_uptime(seconds: int) -> str:
    """Format an uptime in seconds as days, hours and minutes."""
    if seconds < 0:
        raise ValueError(f"uptime must not be negative: {seconds}")
    days = seconds // 86400
    hours = (seconds % 86400) // 3600
    minutes = (seconds % 3600) // 60
    return f"{days} days, {hours} hours, {minutes} minutes"