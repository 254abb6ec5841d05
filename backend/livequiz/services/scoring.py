DEFAULT_MAX_POINTS = 1000


def compute_points(correct: bool, elapsed_ms: float, time_limit_sec: float,
                   max_points: int = DEFAULT_MAX_POINTS) -> int:
    """Points for one answer.

    Wrong answers score 0. Correct answers decay linearly from ``max_points``
    (instant) to a floor of 1 at the end of the window; the elapsed time is
    clamped to ``[0, limit]`` so a late-arriving answer still scores 1.
    """
    if not correct:
        return 0
    limit_ms = time_limit_sec * 1000
    t = max(0.0, min(1.0, elapsed_ms / limit_ms)) if limit_ms > 0 else 1.0
    # half-up rounding; round() would use banker's rounding
    points = int(max_points * (1 - t) + 0.5)
    return max(1, points)
