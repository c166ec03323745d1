import unittest
from unittest.mock import MagicMock, patch

import requests

from daymark.retry import is_transient, retry


def http_error(status):
    resp = MagicMock()
    resp.status_code = status
    return requests.HTTPError(response=resp)


def always_raises(exc, calls):
    def fn():
        calls.append(1)
        raise exc
    return fn


@patch("daymark.retry.time.sleep")
class RetryTests(unittest.TestCase):
    def test_recovers_after_transient_failures(self, sleep):
        calls = []

        @retry(max_attempts=3, jitter=False)
        def flaky():
            calls.append(1)
            if len(calls) < 3:
                raise requests.ConnectionError("reset")
            return "ok"

        self.assertEqual(flaky(), "ok")
        self.assertEqual(len(calls), 3)
        self.assertEqual([c.args[0] for c in sleep.call_args_list], [1.0, 2.0])

    def test_gives_up_after_max_attempts(self, sleep):
        calls = []
        with self.assertRaises(requests.HTTPError):
            retry(max_attempts=2)(always_raises(http_error(503), calls))()
        self.assertEqual(len(calls), 2)

    def test_client_errors_are_final(self, sleep):
        calls = []
        with self.assertRaises(requests.HTTPError):
            retry(max_attempts=5)(always_raises(http_error(404), calls))()
        self.assertEqual(len(calls), 1)
        sleep.assert_not_called()

    def test_non_retryable_exception_propagates(self, sleep):
        calls = []
        with self.assertRaises(KeyError):
            retry()(always_raises(KeyError("x"), calls))()
        self.assertEqual(len(calls), 1)

    def test_delay_capped(self, sleep):
        calls = []
        with self.assertRaises(requests.Timeout):
            retry(max_attempts=4, base_delay=10, max_delay=15, jitter=False)(
                always_raises(requests.Timeout(), calls)
            )()
        self.assertEqual([c.args[0] for c in sleep.call_args_list], [10, 15, 15])


class IsTransientTests(unittest.TestCase):
    def test_classification(self):
        self.assertTrue(is_transient(http_error(429)))
        self.assertTrue(is_transient(http_error(502)))
        self.assertFalse(is_transient(http_error(401)))
        self.assertTrue(is_transient(requests.ConnectionError()))


if __name__ == "__main__":
    unittest.main()
