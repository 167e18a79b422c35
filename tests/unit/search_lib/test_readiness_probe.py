"""Unit tests for the health probe server."""

from search_lib.helpers.readiness_probe import HealthServer


class TestHealthServer:
    """Tests for probe responses."""

    def setup_method(self) -> None:
        """Create a server that is not started."""
        self.server = HealthServer(port=0)

    def test_liveness_always_healthy(self) -> None:
        """Test /healthz answers regardless of readiness."""
        assert self.server.status_for("/healthz") == (200, {"status": "healthy"})
        assert self.server.status_for("/") == (200, {"status": "healthy"})

    def test_not_ready_by_default(self) -> None:
        """Test /readyz fails until the service marks itself ready."""
        assert self.server.status_for("/readyz") == (503, {"status": "not_ready"})

    def test_ready_after_set_ready(self) -> None:
        """Test set_ready flips the readiness probe."""
        self.server.set_ready()

        assert self.server.status_for("/readyz") == (200, {"status": "ready"})

        self.server.set_ready(False)

        assert self.server.status_for("/readyz")[0] == 503

    def test_unknown_path(self) -> None:
        """Test unknown paths return 404."""
        assert self.server.status_for("/metrics")[0] == 404

    def test_stop_before_start_is_noop(self) -> None:
        """Test stopping an unstarted server does nothing."""
        self.server.stop()
