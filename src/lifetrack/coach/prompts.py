"""Prompt builders for coaching text."""

from lifetrack.tracking.models import ActivityRecord


def format_duration(duration_ms: int) -> str:
    """Format a duration as human-readable text.

    Examples:
        >>> format_duration(5_400_000)
        '1 hour and 30 minutes'
        >>> format_duration(95_000)
        '1 minute and 35 seconds'
    """
    seconds = max(0, duration_ms // 1000)
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)

    parts = []
    if hours > 0:
        parts.append(f"{hours} hour{'s' if hours != 1 else ''}")
    if minutes > 0:
        parts.append(f"{minutes} minute{'s' if minutes != 1 else ''}")
    if secs > 0 and hours == 0:
        parts.append(f"{secs} second{'s' if secs != 1 else ''}")

    return " and ".join(parts) if parts else "less than a second"


def build_run_summary_prompt(record: ActivityRecord) -> str:
    """Prompt for a short congratulation on a finished run."""
    lines = [
        "You are an AI running coach for the 'life.' app. "
        "Write a short, encouraging summary of this run:",
        f"Distance: {record.distance_m / 1000:.2f} km",
        f"Active time: {format_duration(record.duration_ms)}",
        f"Average speed: {record.avg_speed_kmh:.1f} km/h",
        f"Estimated calories: {record.calories}",
    ]
    if record.notes:
        lines.append(f"Runner's note: {record.notes}")
    lines.append("")
    lines.append("Keep it to 2-3 sentences and suggest one thing to focus on next time.")
    return "\n".join(lines)


def build_motivational_prompt(
    streak_days: int,
    recent_activity: bool,
    mood: str | None = None,
) -> str:
    """Prompt for a motivational message based on the user's streak."""
    lines = [
        "You are an AI motivational coach for the 'life.' app. "
        "Generate a short, powerful motivational message based on this user data:",
        f"Current streak: {streak_days} days",
        f"Recent activity: {'Active' if recent_activity else 'Inactive'}",
    ]
    if mood:
        lines.append(f"Current mood: {mood}")
    lines.append("")
    lines.append(
        "The message should be positive, uplifting, and personalized to their "
        "current situation. Keep it concise (1-3 sentences) but impactful."
    )
    return "\n".join(lines)


__all__ = ["build_motivational_prompt", "build_run_summary_prompt", "format_duration"]
