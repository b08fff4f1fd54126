"""
Regression tests for configuration behavior.
Ensures configuration uses environment variables instead of hardcoded values.
"""

import unittest
import os
from unittest.mock import patch


class TestConfigRegression(unittest.TestCase):
    """Regression tests for configuration management."""

    def tearDown(self):
        import importlib
        import config
        importlib.reload(config)

    def test_canvas_base_url_uses_env_var(self):
        """
        REGRESSION: CANVAS_BASE_URL must come from the environment with a fallback.
        """
        with patch.dict(os.environ, {'CANVAS_BASE_URL': 'https://custom.canvas.edu/api/v1/'}):
            # Reload config to pick up new env var
            import importlib
            import config
            importlib.reload(config)

            self.assertEqual(config.CANVAS_BASE_URL, 'https://custom.canvas.edu/api/v1/')

    def test_canvas_base_url_has_default(self):
        """
        REGRESSION: Ensure CANVAS_BASE_URL has a sensible default.
        """
        import config

        # Even without env var, should have a default
        self.assertIsNotNone(config.CANVAS_BASE_URL)
        self.assertIn('canvas', config.CANVAS_BASE_URL.lower())

    def test_retry_attempts_are_one_setting(self):
        """
        REGRESSION: retry attempts were 5 in one call path and 10 in another.
        Both now come from CANVAS_MAX_ATTEMPTS.
        """
        with patch.dict(os.environ, {'CANVAS_MAX_ATTEMPTS': '10'}):
            import importlib
            import config
            importlib.reload(config)

            from canvas_connector.client import CanvasClient
            client = CanvasClient(base_url='https://x.canvas.edu', token='t')

            self.assertEqual(client.retry_policy.max_attempts, 10)

    def test_concurrency_limit_configurable(self):
        """
        REGRESSION: the simultaneous request limit was a hardcoded 20.
        """
        with patch.dict(os.environ, {'CANVAS_CONCURRENCY_LIMIT': '4'}):
            import importlib
            import config
            importlib.reload(config)

            from canvas_connector.client import CanvasClient
            client = CanvasClient(base_url='https://x.canvas.edu', token='t')

            self.assertEqual(client.gate.limit, 4)

    def test_page_cap_can_be_disabled(self):
        """
        REGRESSION: a page cap of 0 means no cap, not a cap of zero pages.
        """
        with patch.dict(os.environ, {'CANVAS_MAX_PAGES': '0'}):
            import importlib
            import config
            importlib.reload(config)

            from canvas_connector.client import CanvasClient
            client = CanvasClient(base_url='https://x.canvas.edu', token='t')

            self.assertIsNone(client.max_pages)


if __name__ == "__main__":
    unittest.main()
