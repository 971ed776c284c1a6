"""
Tests for health check endpoints
"""
import pytest
import time
from unittest.mock import Mock, patch
from health_checks import (
    get_system_metrics,
    get_uptime,
    check_external_services,
    check_database,
    check_filesystem,
)


@pytest.mark.unit
class TestSystemMetrics:
    """Tests for system metrics collection"""

    def test_get_system_metrics_returns_dict(self):
        metrics = get_system_metrics()
        assert isinstance(metrics, dict)

    def test_system_metrics_has_memory_info(self):
        metrics = get_system_metrics()
        if metrics:
            assert 'memory_mb' in metrics
            assert 'memory_percent' in metrics
            assert 'threads' in metrics

    @patch('health_checks.psutil.Process')
    def test_system_metrics_handles_errors(self, mock_process):
        """Errors give an empty dict instead of failing the endpoint"""
        mock_process.side_effect = Exception("Test error")
        assert get_system_metrics() == {}


@pytest.mark.unit
class TestUptime:
    """Tests for uptime calculation"""

    def test_uptime_has_required_fields(self):
        uptime = get_uptime()
        assert 'uptime_seconds' in uptime
        assert 'uptime_minutes' in uptime
        assert 'uptime_hours' in uptime
        assert 'started_at' in uptime

    def test_uptime_increases_over_time(self):
        uptime1 = get_uptime()
        time.sleep(0.1)
        uptime2 = get_uptime()
        assert uptime2['uptime_seconds'] > uptime1['uptime_seconds']


@pytest.mark.unit
class TestExternalServicesCheck:
    """Tests for external service configuration check"""

    def test_all_configured(self):
        mock_app = Mock()
        mock_app.config = {
            'STORAGE_BUCKET': 'docs',
            'SMTP_HOST': 'smtp.test',
            'SMTP_USER': 'user',
            'SEARCH_APP_ID': 'APP',
            'SEARCH_API_KEY': 'KEY',
        }

        services = check_external_services(mock_app)

        assert services == {'object_storage': True, 'smtp': True, 'search_index': True}

    def test_nothing_configured(self):
        mock_app = Mock()
        mock_app.config = {}

        services = check_external_services(mock_app)

        assert not any(services.values())

    def test_search_needs_both_keys(self):
        mock_app = Mock()
        mock_app.config = {'SEARCH_APP_ID': 'APP'}

        assert check_external_services(mock_app)['search_index'] is False


@pytest.mark.unit
class TestDatabaseCheck:

    @patch('database.connection.check_db_connection')
    def test_healthy(self, mock_check):
        mock_check.return_value = True
        assert check_database() == {'healthy': True}

    @patch('database.connection.check_db_connection')
    def test_unhealthy(self, mock_check):
        mock_check.side_effect = RuntimeError("Cannot connect to database")
        result = check_database()
        assert result['healthy'] is False
        assert 'Cannot connect' in result['error']


@pytest.mark.unit
class TestFilesystemCheck:
    """Tests for output folder availability check"""

    def _app(self):
        mock_app = Mock()
        mock_app.config = {'OUTPUT_FOLDER': 'outputs'}
        return mock_app

    @patch('os.path.exists')
    @patch('os.access')
    @patch('os.getcwd')
    def test_check_filesystem_all_healthy(self, mock_getcwd, mock_access, mock_exists):
        mock_getcwd.return_value = '/test'
        mock_exists.return_value = True
        mock_access.return_value = True

        filesystem = check_filesystem(self._app())

        assert filesystem['outputs'] == {'exists': True, 'writable': True, 'healthy': True}

    @patch('os.path.exists')
    @patch('os.access')
    @patch('os.getcwd')
    def test_check_filesystem_directory_missing(self, mock_getcwd, mock_access, mock_exists):
        mock_getcwd.return_value = '/test'
        mock_exists.return_value = False
        mock_access.return_value = False

        filesystem = check_filesystem(self._app())

        assert filesystem['outputs']['exists'] is False
        assert filesystem['outputs']['healthy'] is False

    @patch('os.path.exists')
    @patch('os.access')
    @patch('os.getcwd')
    def test_check_filesystem_directory_not_writable(self, mock_getcwd, mock_access, mock_exists):
        mock_getcwd.return_value = '/test'
        mock_exists.return_value = True
        mock_access.return_value = False

        filesystem = check_filesystem(self._app())

        assert filesystem['outputs']['writable'] is False
        assert filesystem['outputs']['healthy'] is False


@pytest.mark.integration
class TestHealthCheckEndpoints:
    """Integration tests for health check endpoints on the full app"""

    def test_health_endpoint(self, client):
        response = client.get('/health')
        assert response.status_code == 200
        data = response.get_json()
        assert data['status'] == 'healthy'
        assert data['service'] == 'ooh-ops'
        assert 'timestamp' in data

    def test_ping_endpoint_returns_pong(self, client):
        response = client.get('/health/ping')
        assert response.status_code == 200
        assert response.data == b'pong'

    def test_ready_endpoint_reports_checks(self, client):
        response = client.get('/health/ready')
        data = response.get_json()
        assert data['checks']['database']['healthy'] is True
        assert 'filesystem' in data['checks']
        assert data['checks']['services']['smtp'] is False

    def test_metrics_endpoint(self, client):
        response = client.get('/health/metrics')
        assert response.status_code == 200
        data = response.get_json()
        assert 'uptime_seconds' in data['uptime']
        assert 'python_version' in data
        assert 'services' in data
