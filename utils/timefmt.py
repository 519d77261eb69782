"""Human-readable duration rendering for comments, stats and notifications."""


def format_duration(seconds: float) -> str:
    """
    Render a duration in seconds as a compact string.

    Examples: 0 -> "0s", 0.15 -> "150ms", 2 -> "2s", 3723.5 -> "1h2m3.5s".
    """
    if seconds <= 0:
        return "0s"
    if seconds < 1e-3:
        return f"{round(seconds * 1e6, 3):g}µs"
    if seconds < 1:
        return f"{round(seconds * 1e3, 3):g}ms"
    if seconds < 60:
        return f"{round(seconds, 3):g}s"

    minutes, secs = divmod(seconds, 60)
    hours, minutes = divmod(int(minutes), 60)
    parts = []
    if hours:
        parts.append(f"{hours}h")
    parts.append(f"{minutes}m")
    parts.append(f"{round(secs, 3):g}s")
    return "".join(parts)
