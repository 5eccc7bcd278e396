import threading
import time

from app.config import settings

AUTH_LIMITED_PATHS = {"/api/auth/login", "/api/auth/register", "/api/auth/forgot-password"}
UPLOAD_LIMITED_PATHS = {"/api/resumes", "/api/resumes/analyze", "/api/profile/avatar"}
AI_LIMITED_PATHS = {"/api/jobs/recommendations", "/api/profile/rate"}
AI_LIMITED_SUFFIXES = ("/match-score", "/calculate-my-match")


class InMemoryRateLimiter:
    """
    Fixed-window limiter keyed by "<client-ip>:<path>".
    State lives in the API process, so limits are per instance.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._state: dict[str, tuple[int, float]] = {}

    def allow(self, key: str, limit: int, window_seconds: int) -> tuple[bool, int]:
        """Returns (allowed, retry_after_seconds)."""
        now = time.time()
        with self._lock:
            count, window_start = self._state.get(key, (0, now))
            if now - window_start >= window_seconds:
                count, window_start = 0, now
            if count >= limit:
                return False, max(1, int(window_seconds - (now - window_start)))
            self._state[key] = (count + 1, window_start)
            return True, 0

    def reset(self) -> None:
        with self._lock:
            self._state.clear()


def limit_for(method: str, path: str) -> int | None:
    """Per-minute budget for a request, or None when the route is unmetered."""
    if path in AUTH_LIMITED_PATHS:
        return settings.rate_limit_auth_per_min
    if path.startswith("/api/ai/") or path in AI_LIMITED_PATHS or path.endswith(AI_LIMITED_SUFFIXES):
        return settings.rate_limit_ai_per_min
    if method == "POST" and path in UPLOAD_LIMITED_PATHS:
        return settings.rate_limit_upload_per_min
    return None


rate_limiter = InMemoryRateLimiter()
