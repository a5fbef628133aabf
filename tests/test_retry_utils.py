import threading
import unittest
from unittest.mock import patch, MagicMock

import requests

from media_gen.config import OrchestratorConfig
from media_gen.exceptions import (
    GenerationError,
    OperationCancelledError,
    OperationTimeoutError,
    ProtocolError,
    ValidationError,
)
from media_gen.retry_utils import calculate_retry_delay, retry_operation


class TestCalculateRetryDelay(unittest.TestCase):
    def test_exponential_growth_without_jitter(self):
        delays = [calculate_retry_delay(n, base_delay=2, max_delay=60, jitter_percent=0) for n in range(1, 7)]
        self.assertEqual(delays, [2, 4, 8, 16, 32, 32])

    def test_capped_at_max_delay(self):
        self.assertEqual(calculate_retry_delay(5, base_delay=10, max_delay=60, jitter_percent=0), 60)

    def test_jitter_bounds(self):
        for _ in range(50):
            delay = calculate_retry_delay(1, base_delay=10, max_delay=60, jitter_percent=0.2)
            self.assertGreaterEqual(delay, 9)
            self.assertLessEqual(delay, 11)


class TestRetryOperation(unittest.TestCase):
    def setUp(self):
        self.config = OrchestratorConfig(retry_base_delay=0.01, retry_max_delay=0.01, retry_jitter_percent=0)
        self.logger = MagicMock()

    def test_success_first_try(self):
        operation = MagicMock(return_value="ok")
        self.assertEqual(retry_operation(operation, self.config, self.logger), "ok")
        operation.assert_called_once()

    def test_retries_retryable_errors(self):
        operation = MagicMock(side_effect=[GenerationError("busy"), OperationTimeoutError("slow"), "ok"])
        self.assertEqual(retry_operation(operation, self.config, self.logger, max_attempts=3), "ok")
        self.assertEqual(operation.call_count, 3)

    def test_does_not_retry_non_retryable(self):
        for error in (ValidationError("bad"), ProtocolError("broken")):
            operation = MagicMock(side_effect=error)
            with self.assertRaises(type(error)):
                retry_operation(operation, self.config, self.logger)
            operation.assert_called_once()

    def test_gives_up_after_max_attempts(self):
        operation = MagicMock(side_effect=GenerationError("busy"))
        with self.assertRaises(GenerationError):
            retry_operation(operation, self.config, self.logger, max_attempts=2)
        self.assertEqual(operation.call_count, 2)

    def test_library_errors_normalized(self):
        operation = MagicMock(side_effect=requests.exceptions.Timeout("slow"))
        with self.assertRaises(OperationTimeoutError):
            retry_operation(operation, self.config, self.logger, max_attempts=1)

    def test_cancel_during_backoff(self):
        cancel = threading.Event()
        cancel.set()
        operation = MagicMock(side_effect=GenerationError("busy"))
        with self.assertRaises(OperationCancelledError):
            retry_operation(operation, self.config, self.logger, cancel_event=cancel)
        operation.assert_called_once()

    @patch("media_gen.retry_utils.calculate_retry_delay", return_value=0.01)
    def test_uses_config_delays(self, mock_delay):
        operation = MagicMock(side_effect=[GenerationError("busy"), "ok"])
        retry_operation(operation, self.config, self.logger)
        mock_delay.assert_called_once_with(1, 0.01, 0.01, 0)


if __name__ == "__main__":
    unittest.main()
