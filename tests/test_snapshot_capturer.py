"""
Element capture with a stubbed Playwright.
"""

import unittest
from unittest.mock import patch

from brand_auditor.services.errors import CaptureFailed
from brand_auditor.services.snapshot_capturer import SnapshotCapturer

from helpers import fake_playwright

TARGET = "brand_auditor.services.snapshot_capturer.async_playwright"


class TestSnapshotCapturer(unittest.IsolatedAsyncioTestCase):
    async def test_missing_selector_is_skipped(self):
        manager, browser, page = fake_playwright({"#hero": 1})
        with patch(TARGET, return_value=manager):
            shots = await SnapshotCapturer(ssrf_protection=False).capture("https://a.com/", ["#hero", "#missing"])

        self.assertEqual([s.selector for s in shots], ["#hero"])
        self.assertEqual(shots[0].image_bytes, b"png:#hero")
        browser.close.assert_awaited_once()

    async def test_waits_for_network_idle(self):
        manager, browser, page = fake_playwright({"main": 1})
        with patch(TARGET, return_value=manager):
            await SnapshotCapturer(navigation_timeout=5, ssrf_protection=False).capture("https://a.com/", ["main"])

        page.goto.assert_awaited_once_with("https://a.com/", wait_until="networkidle", timeout=5000)

    async def test_render_error_is_skipped(self):
        manager, browser, page = fake_playwright({"#a": 1, "#b": 1}, broken=("#a",))
        with patch(TARGET, return_value=manager):
            shots = await SnapshotCapturer(ssrf_protection=False).capture("https://a.com/", ["#a", "#b"])
        self.assertEqual([s.selector for s in shots], ["#b"])

    async def test_ambiguous_selector_uses_first_match(self):
        manager, browser, page = fake_playwright({"p": 4})
        with patch(TARGET, return_value=manager):
            shots = await SnapshotCapturer(ssrf_protection=False).capture("https://a.com/", ["p"])
        self.assertEqual(len(shots), 1)

    async def test_duplicates_and_blanks_are_ignored(self):
        manager, browser, page = fake_playwright({"#hero": 1})
        with patch(TARGET, return_value=manager):
            shots = await SnapshotCapturer(ssrf_protection=False).capture("https://a.com/", ["#hero", " #hero ", "", "  "])
        self.assertEqual(len(shots), 1)
        self.assertEqual(page.locator.call_count, 1)

    async def test_no_selectors_does_not_launch_browser(self):
        manager, browser, page = fake_playwright({})
        with patch(TARGET, return_value=manager) as launcher:
            shots = await SnapshotCapturer(ssrf_protection=False).capture("https://a.com/", [])
        self.assertEqual(shots, [])
        launcher.assert_not_called()

    async def test_nothing_resolves_is_empty_not_error(self):
        manager, browser, page = fake_playwright({})
        with patch(TARGET, return_value=manager):
            shots = await SnapshotCapturer(ssrf_protection=False).capture("https://a.com/", ["#x", "#y"])
        self.assertEqual(shots, [])
        browser.close.assert_awaited_once()

    async def test_navigation_failure_raises_and_closes_browser(self):
        manager, browser, page = fake_playwright({"#hero": 1}, goto_error=TimeoutError("net::ERR_NAME_NOT_RESOLVED"))
        with patch(TARGET, return_value=manager):
            with self.assertRaises(CaptureFailed):
                await SnapshotCapturer(ssrf_protection=False).capture("https://nowhere.invalid/", ["#hero"])
        browser.close.assert_awaited_once()

    async def test_browser_launch_failure_raises_capture_failed(self):
        manager, browser, page = fake_playwright({"#hero": 1})
        playwright = manager.__aenter__.return_value
        playwright.chromium.launch.side_effect = RuntimeError("Executable doesn't exist")
        with patch(TARGET, return_value=manager):
            with self.assertRaises(CaptureFailed) as cm:
                await SnapshotCapturer(ssrf_protection=False).capture("https://a.com/", ["#hero"])
        self.assertIn("Executable doesn't exist", str(cm.exception))

    async def test_page_setup_failure_raises_and_closes_browser(self):
        manager, browser, page = fake_playwright({"#hero": 1})
        browser.new_context.side_effect = RuntimeError("Target closed")
        with patch(TARGET, return_value=manager):
            with self.assertRaises(CaptureFailed):
                await SnapshotCapturer(ssrf_protection=False).capture("https://a.com/", ["#hero"])
        browser.close.assert_awaited_once()


class TestCaptureSsrfGuard(unittest.IsolatedAsyncioTestCase):
    async def test_loopback_target_is_refused_before_launch(self):
        manager, browser, page = fake_playwright({"#hero": 1})
        with patch(TARGET, return_value=manager) as launcher:
            with self.assertRaises(CaptureFailed) as cm:
                await SnapshotCapturer(ssrf_protection=True).capture("http://127.0.0.1:8080/admin", ["#hero"])
        self.assertIn("blocked", str(cm.exception))
        launcher.assert_not_called()
        page.goto.assert_not_called()

    async def test_localhost_is_refused(self):
        manager, browser, page = fake_playwright({"#hero": 1})
        with patch(TARGET, return_value=manager) as launcher:
            with self.assertRaises(CaptureFailed):
                await SnapshotCapturer(ssrf_protection=True).capture("http://localhost/", ["#hero"])
        launcher.assert_not_called()
