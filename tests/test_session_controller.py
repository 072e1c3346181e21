"""Tests for the session lifecycle: token gate, identity check, start and stop."""

import unittest

from dropbox_client import AuthenticationError, DropboxApiError
from fakes import FakeDropboxClient, MemoryDelivery, RecordingView, single_page
from models import ActionRole, RunState, StatusLevel
from session_controller import ExportSession

CONFIG = {'export': {'request_delay': 0, 'file_extension': '.paper'}}


class StoppingView(RecordingView):
    """Presses stop once ``stop_after`` items have been attempted."""

    def __init__(self):
        super().__init__()
        self.session = None
        self.stop_after = 1

    def update_progress(self, snapshot):
        super().update_progress(snapshot)
        if self.stop_after and snapshot.current == self.stop_after:
            self.session.stop()


class TestExportSession(unittest.TestCase):
    def setUp(self):
        self.view = RecordingView()
        self.delivery = MemoryDelivery()
        self.factory_tokens = []

    def make_session(self, client, view=None):
        def factory(token):
            self.factory_tokens.append(token)
            return client

        return ExportSession(CONFIG, view or self.view, client_factory=factory, delivery=self.delivery)

    def test_initial_binding_is_start(self):
        self.make_session(FakeDropboxClient())
        self.assertEqual(self.view.bindings[-1].role, ActionRole.START)

    def test_empty_token_never_reaches_the_network(self):
        session = self.make_session(FakeDropboxClient())

        self.assertIsNone(session.start('   '))

        self.assertEqual(self.factory_tokens, [])
        self.assertEqual(self.view.statuses, [("Please enter your access token.", StatusLevel.ERROR)])
        self.assertEqual(session.state, RunState.IDLE)

    def test_rejected_token_never_enumerates(self):
        client = FakeDropboxClient(
            pages=single_page('/A.paper'),
            account_error=AuthenticationError("HTTP 401", status_code=401, error_summary="invalid_access_token/...")
        )
        session = self.make_session(client)

        self.assertIsNone(session.start('bad-token'))

        self.assertEqual(client.calls, ['get_current_account'])
        self.assertEqual(session.state, RunState.IDLE)
        self.assertEqual(session.last_error, "invalid_access_token/...")
        self.assertEqual(
            self.view.errors,
            ["Error: invalid_access_token/.... Check the log for details."]
        )
        self.assertEqual([b.role for b in self.view.bindings], [ActionRole.START, ActionRole.STOP, ActionRole.START])

    def test_identity_check_failure_is_authentication_error(self):
        client = FakeDropboxClient(account_error=DropboxApiError("Request timed out after 30s"))
        session = self.make_session(client)

        with self.assertRaises(AuthenticationError):
            session.discover('token')
        self.assertEqual(client.calls, ['get_current_account'])

    def test_discover_requires_token(self):
        session = self.make_session(FakeDropboxClient())
        with self.assertRaises(AuthenticationError):
            session.discover('')

    def test_listing_failure_aborts_to_idle(self):
        client = FakeDropboxClient(listing_error_on_page=0)
        session = self.make_session(client)

        self.assertIsNone(session.start('token'))

        self.assertEqual(session.state, RunState.IDLE)
        self.assertEqual(len(self.view.messages), 2)
        self.assertEqual(self.view.messages[0], "Authenticated successfully. (ZIP: false)")
        self.assertTrue(self.view.messages[1].startswith("Error: Failed to list files: path/not_found/..."))

    def test_unexpected_error_returns_to_restartable_state(self):
        session = self.make_session(FakeDropboxClient(account_error=ValueError("Expecting value")))

        self.assertIsNone(session.start('token'))

        self.assertEqual(session.state, RunState.IDLE)
        self.assertEqual(self.view.errors, ["Error: Expecting value. Check the log for details."])
        self.assertEqual(self.view.bindings[-1].role, ActionRole.START)

        client = FakeDropboxClient(pages=single_page('/A.paper'))
        session.client_factory = lambda token: client
        report = session.start('token')

        self.assertEqual(report.outcome, RunState.COMPLETED)


    def test_no_documents_found(self):
        session = self.make_session(FakeDropboxClient())

        self.assertIsNone(session.start('token', use_zip=True))

        self.assertEqual(self.view.messages[0], "Authenticated successfully. (ZIP: true)")
        self.assertEqual(self.view.errors, ["No .paper files found in your Dropbox."])
        self.assertEqual(session.state, RunState.IDLE)
        self.assertEqual(self.delivery.saved, {})

    def test_successful_run_completes(self):
        client = FakeDropboxClient(pages=single_page('/A.paper', '/X/B.paper'))
        session = self.make_session(client)

        report = session.start(' token ')

        self.assertEqual(self.factory_tokens, ['token'])
        self.assertEqual(report.outcome, RunState.COMPLETED)
        self.assertEqual(session.state, RunState.COMPLETED)
        self.assertEqual(self.view.messages[0], "Authenticated successfully. (ZIP: false)")
        self.assertEqual(self.view.progress_messages, ["Found 2 files. Starting export..."])
        self.assertEqual(sorted(self.delivery.saved), ['A.md', 'X ___ B.md'])
        self.assertEqual(self.view.bindings[-1].role, ActionRole.START)

    def test_stop_then_restart(self):
        view = StoppingView()
        client = FakeDropboxClient(pages=single_page('/A.paper', '/B.paper', '/C.paper'))
        session = self.make_session(client, view)
        view.session = session

        report = session.start('token')

        self.assertTrue(report.stopped)
        self.assertEqual(session.state, RunState.STOPPED)
        self.assertEqual(client.exported_paths, ['/a.paper'])

        # A new run starts from scratch with a fresh cancel token
        client2 = FakeDropboxClient(pages=single_page('/A.paper'))
        session.client_factory = lambda token: client2
        view.stop_after = None

        report = session.start('token')

        self.assertEqual(report.outcome, RunState.COMPLETED)
        self.assertEqual(session.state, RunState.COMPLETED)
        self.assertTrue(client.closed)

    def test_stop_while_idle_is_ignored(self):
        session = self.make_session(FakeDropboxClient())
        session.stop()
        self.assertEqual(session.state, RunState.IDLE)


if __name__ == '__main__':
    unittest.main()
