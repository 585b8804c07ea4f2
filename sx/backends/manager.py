"""Backend registry with primary/fallback dispatch."""

from __future__ import annotations

from loguru import logger

from sx.backends.base import BackendError, SearchBackend
from sx.backends.models import SearchOptions, SearchResult


class SearchError(Exception):
    """Raised when backend selection or the whole fallback chain fails."""


class BackendConfigError(SearchError):
    """Raised for unknown backend names or a missing primary."""


class AllBackendsFailedError(SearchError):
    """Raised when the primary and every fallback failed or were skipped."""

    def __init__(self, failures: list[str]):
        self.failures = list(failures)
        super().__init__("all backends failed:\n  " + "\n  ".join(self.failures))


class BackendManager:
    """Coordinates search across registered backends.

    The primary is tried first. On failure the fallbacks are tried one at a
    time in declared order and the first success wins. Backends are never
    raced and their order never changes at runtime.
    """

    def __init__(self) -> None:
        self._registry: dict[str, SearchBackend] = {}
        self._primary: SearchBackend | None = None
        self._fallbacks: list[SearchBackend] = []

    @property
    def primary(self) -> SearchBackend | None:
        return self._primary

    @property
    def fallbacks(self) -> list[SearchBackend]:
        return list(self._fallbacks)

    def register(self, backend: SearchBackend) -> None:
        """Add a backend. A later registration with the same name replaces it."""
        self._registry[backend.name] = backend

    def get_backend(self, name: str) -> SearchBackend | None:
        return self._registry.get(name)

    def set_primary(self, name: str) -> None:
        self._primary = self._lookup(name)

    def set_fallbacks(self, names: list[str]) -> None:
        """Replace the fallback list; unknown names leave it untouched."""
        resolved = [self._lookup(name, label="fallback backend") for name in names]
        self._fallbacks = resolved

    def search(self, options: SearchOptions) -> tuple[list[SearchResult], str]:
        """Search with the primary, falling back in order on failure.

        Returns the results and the name of the backend that produced them.
        An empty result list counts as success.
        """
        if self._primary is None:
            raise BackendConfigError("no primary backend configured")

        primary = self._primary
        try:
            results = primary.search(options)
        except BackendError as e:
            logger.debug("Primary backend {} failed ({}): {}", primary.name, e.kind, e.message)
            failures = [str(e)]
        else:
            logger.debug("Primary backend {} returned {} results", primary.name, len(results))
            return results, primary.name

        for backend in self._fallbacks:
            if not backend.is_available():
                logger.debug("Skipping fallback backend {}: not configured", backend.name)
                failures.append(f"{backend.name}: not configured")
                continue

            logger.debug("Trying fallback backend {}", backend.name)
            try:
                results = backend.search(options)
            except BackendError as e:
                logger.debug("Fallback backend {} failed ({}): {}", backend.name, e.kind, e.message)
                failures.append(str(e))
                continue

            logger.info("Using fallback backend {} after {} failed", backend.name, primary.name)
            return results, backend.name

        raise AllBackendsFailedError(failures)

    def search_explicit(self, name: str, options: SearchOptions) -> list[SearchResult]:
        """Search one named backend with no fallback."""
        backend = self._lookup(name)
        if not backend.is_available():
            raise BackendError(name, "not configured (missing API key?)", kind="unavailable")
        return backend.search(options)

    def available_backends(self) -> list[str]:
        """Names of every registered backend."""
        return list(self._registry)

    def configured_backends(self) -> list[str]:
        """Names of registered backends that have enough configuration to run."""
        return [name for name, backend in self._registry.items() if backend.is_available()]

    def _lookup(self, name: str, *, label: str = "backend") -> SearchBackend:
        backend = self._registry.get(name)
        if backend is None:
            raise BackendConfigError(
                f"unknown {label}: {name} (available: {', '.join(self.available_backends())})"
            )
        return backend
