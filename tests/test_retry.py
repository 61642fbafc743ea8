"""Tests for the retry decorator."""
import unittest
from unittest import mock

import httplib2
from googleapiclient.errors import HttpError

from spendflow.utils.retry import retry_with_backoff


def http_error(status):
    return HttpError(httplib2.Response({"status": status}), b'{"error": {"message": "boom"}}')


class TestRetryWithBackoff(unittest.TestCase):

    def setUp(self):
        patcher = mock.patch("spendflow.utils.retry.time.sleep")
        self.sleep = patcher.start()
        self.addCleanup(patcher.stop)

    def test_retries_transient_errors(self):
        attempts = []

        @retry_with_backoff(max_retries=3, initial_delay=1, backoff_factor=2)
        def flaky():
            attempts.append(1)
            if len(attempts) < 3:
                raise ConnectionError("reset")
            return "ok"

        self.assertEqual(flaky(), "ok")
        self.assertEqual(len(attempts), 3)
        self.assertEqual([c.args[0] for c in self.sleep.call_args_list], [1, 2])

    def test_client_errors_not_retried(self):
        attempts = []

        @retry_with_backoff(max_retries=3, initial_delay=0)
        def forbidden():
            attempts.append(1)
            raise http_error(403)

        with self.assertRaises(HttpError):
            forbidden()
        self.assertEqual(len(attempts), 1)

    def test_rate_limit_and_server_errors_retried(self):
        errors = [http_error(429), http_error(503)]

        @retry_with_backoff(max_retries=3, initial_delay=0)
        def throttled():
            if errors:
                raise errors.pop(0)
            return "done"

        self.assertEqual(throttled(), "done")

    def test_gives_up_after_max_retries(self):
        attempts = []

        @retry_with_backoff(max_retries=2, initial_delay=0)
        def down():
            attempts.append(1)
            raise TimeoutError("timed out")

        with self.assertRaises(TimeoutError):
            down()
        self.assertEqual(len(attempts), 3)

    def test_other_errors_propagate_immediately(self):
        attempts = []

        @retry_with_backoff(max_retries=3, initial_delay=0)
        def broken():
            attempts.append(1)
            raise ValueError("bad input")

        with self.assertRaises(ValueError):
            broken()
        self.assertEqual(len(attempts), 1)


if __name__ == "__main__":
    unittest.main()
