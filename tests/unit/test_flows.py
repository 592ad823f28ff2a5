from __future__ import annotations

from dataclasses import replace

import pytest

from gitty.core.result import Err, GitError, HostingError, ModelProviderError, Ok
from gitty.git.hosting import AUTH_HINT
from gitty.ui.fields import set_value
from gitty.ui.flows import commit, confirm, publish, release
from gitty.ui.flows.commit import CommitFlow, CommitStage
from gitty.ui.flows.confirm import ConfirmKind, ConfirmStage
from gitty.ui.flows.publish import PublishFlow, PublishStage
from gitty.ui.flows.release import ReleaseStage
from gitty.ui.types import (
    CheckStagedChanges,
    CommitChanges,
    CreateRelease,
    FlowStep,
    GenerateCommitMessage,
    InspectPublishTarget,
    KeyPressed,
    PublishNew,
    PublishOutcome,
    PublishTarget,
    PushExisting,
    ResetHard,
    RollbackLastCommit,
    Severity,
    StagedChanges,
)


def key(name: str, character: str | None = None) -> KeyPressed:
    if character is None and len(name) == 1:
        character = name
    return KeyPressed(name, character)


def type_text(step: FlowStep, text: str, on_key) -> FlowStep:  # type: ignore[no-untyped-def]
    for char in text:
        step = on_key(step.flow, key(char))
    return step


class TestCommitFlow:
    def test_start_checks_staged_changes(self) -> None:
        assert commit.start(use_ai=False).dispatch == CheckStagedChanges(include_diff=False)
        assert commit.start(use_ai=True).dispatch == CheckStagedChanges(include_diff=True)

    def test_no_changes_is_informational(self) -> None:
        step = commit.on_result(CommitFlow(), Ok(StagedChanges(has_changes=False)))
        assert step.flow.stage is CommitStage.NO_CHANGES
        assert step.dispatch is None

        exit_step = commit.on_key(step.flow, key("enter"))
        assert exit_step.exit is not None
        assert exit_step.exit.severity is Severity.INFO
        assert exit_step.exit.text == "No staged changes to commit"

    def test_manual_commit_round_trip(self) -> None:
        step = commit.on_result(CommitFlow(), Ok(StagedChanges(has_changes=True)))
        assert step.flow.stage is CommitStage.INPUT

        step = type_text(step, "fix: typo", commit.on_key)
        step = commit.on_key(step.flow, key("tab"))
        step = type_text(step, "details", commit.on_key)
        step = commit.on_key(step.flow, key("enter"))

        assert step.flow.stage is CommitStage.CONFIRM
        assert step.flow.message == "fix: typo\n\ndetails"

        step = commit.on_key(step.flow, key("y"))
        assert step.dispatch == CommitChanges("fix: typo\n\ndetails")
        assert step.flow.stage is CommitStage.COMMITTING

        done = commit.on_result(step.flow, Ok(None))
        assert done.exit is not None
        assert done.exit.text == "Commit successful!"
        assert done.exit.severity is Severity.SUCCESS

    def test_empty_title_is_refused(self) -> None:
        flow = CommitFlow(stage=CommitStage.INPUT)
        step = commit.on_key(flow, key("enter"))
        assert step.flow.stage is CommitStage.INPUT
        assert step.flow.validation == "commit title cannot be empty"
        assert step.dispatch is None

    def test_ai_commit_generates_then_confirms(self) -> None:
        flow = CommitFlow(use_ai=True)
        step = commit.on_result(flow, Ok(StagedChanges(has_changes=True, diff="+x")))
        assert step.dispatch == GenerateCommitMessage("+x")
        assert step.flow.stage is CommitStage.GENERATING

        step = commit.on_result(step.flow, Ok("feat: x\n\n- y"))
        assert step.flow.stage is CommitStage.CONFIRM
        assert step.flow.generated

    def test_edit_splits_generated_message(self) -> None:
        flow = CommitFlow(use_ai=True, stage=CommitStage.CONFIRM, message="feat: x\n\n- y")
        step = commit.on_key(flow, key("e"))
        assert step.flow.stage is CommitStage.INPUT
        assert step.flow.title.value == "feat: x"
        assert step.flow.body.value == "- y"

    def test_decline_and_escape(self) -> None:
        flow = CommitFlow(stage=CommitStage.CONFIRM, message="fix: a")
        declined = commit.on_key(flow, key("n"))
        assert declined.exit is not None and declined.exit.text == "Commit cancelled"

        escaped = commit.on_key(flow, key("escape"))
        assert escaped.exit is not None and escaped.exit.text is None

    def test_keys_ignored_while_busy(self) -> None:
        flow = CommitFlow(stage=CommitStage.GENERATING)
        step = commit.on_key(flow, key("escape"))
        assert step.flow == flow
        assert step.exit is None

    def test_generation_error_is_acknowledged(self) -> None:
        flow = CommitFlow(use_ai=True, stage=CommitStage.GENERATING)
        step = commit.on_result(flow, Err(ModelProviderError("openai error: boom")))
        assert step.flow.stage is CommitStage.ERROR

        exit_step = commit.on_key(step.flow, key("escape"))
        assert exit_step.exit is not None
        assert exit_step.exit.severity is Severity.ERROR
        assert exit_step.exit.text == "Error: openai error: boom"

    def test_newline_in_body_only(self) -> None:
        flow = CommitFlow(stage=CommitStage.INPUT)
        assert commit.on_key(flow, key("alt+enter")).flow.title.value == ""
        body_flow = replace(flow, focus="body", body=set_value(flow.body, "a"))
        assert commit.on_key(body_flow, key("alt+enter")).flow.body.value == "a\n"


class TestConfirmFlow:
    @pytest.mark.parametrize(
        "kind,operation",
        [(ConfirmKind.RESET, ResetHard()), (ConfirmKind.ROLLBACK, RollbackLastCommit())],
    )
    def test_yes_runs_operation(self, kind: ConfirmKind, operation: object) -> None:
        step = confirm.on_key(confirm.start(kind).flow, key("y"))
        assert step.dispatch == operation
        assert step.flow.stage is ConfirmStage.WORKING

    def test_enter_defaults_to_cancel(self) -> None:
        step = confirm.on_key(confirm.start(ConfirmKind.RESET).flow, key("enter"))
        assert step.dispatch is None
        assert step.exit is not None and step.exit.text == "Reset cancelled"

    def test_toggle_then_enter(self) -> None:
        flow = confirm.start(ConfirmKind.ROLLBACK).flow
        flow = confirm.on_key(flow, key("right")).flow
        assert flow.affirmative
        step = confirm.on_key(flow, key("enter"))
        assert step.dispatch == RollbackLastCommit()

    def test_completion_messages(self) -> None:
        flow = confirm.on_key(confirm.start(ConfirmKind.ROLLBACK).flow, key("y")).flow
        done = confirm.on_result(flow, Ok(None))
        assert done.exit is not None and done.exit.text == "Rolled back last commit"

        failed = confirm.on_result(flow, Err(GitError("fatal: ambiguous argument 'HEAD^'")))
        assert failed.flow.stage is ConfirmStage.ERROR
        assert failed.exit is None


class TestReleaseFlow:
    def test_empty_tag_is_refused(self) -> None:
        step = release.on_key(release.start().flow, key("enter"))
        assert step.flow.stage is ReleaseStage.INPUT
        assert step.flow.validation == "tag name cannot be empty"

    def test_release_dispatch(self) -> None:
        step = type_text(release.start(), "v1.2.0", release.on_key)
        step = release.on_key(step.flow, key("tab"))
        step = type_text(step, "notes", release.on_key)
        step = release.on_key(step.flow, key("enter"))
        assert step.flow.stage is ReleaseStage.CONFIRM

        step = release.on_key(step.flow, key("y"))
        assert step.dispatch == CreateRelease("v1.2.0", "notes")

        done = release.on_result(step.flow, Ok("v1.2.0"))
        assert done.exit is not None
        assert done.exit.text == "Release v1.2.0 created and pushed"

    def test_cancel_at_confirm(self) -> None:
        step = type_text(release.start(), "v1", release.on_key)
        step = release.on_key(step.flow, key("enter"))
        step = release.on_key(step.flow, key("n"))
        assert step.exit is not None and step.exit.text == "Release cancelled"
        assert step.dispatch is None


class TestPublishFlow:
    def test_start_inspects_without_side_effects(self) -> None:
        step = publish.start("proj")
        assert step.dispatch == InspectPublishTarget()
        assert step.flow.stage is PublishStage.CHECKING

    def test_existing_remote_skips_form(self) -> None:
        flow = publish.start("proj").flow
        step = publish.on_result(flow, Ok(PublishTarget(branch="dev", has_remote=True)))
        assert step.flow.stage is PublishStage.WORKING
        assert step.dispatch == PushExisting("dev")

    def test_new_repository_goes_through_form(self) -> None:
        flow = publish.start("proj", "private").flow
        step = publish.on_result(flow, Ok(PublishTarget(branch="main", has_remote=False)))
        assert step.flow.stage is PublishStage.FORM
        assert step.dispatch is None

        # name -> description -> visibility -> commit message -> add tag
        for _ in range(4):
            step = publish.on_key(step.flow, key("enter"))
            assert step.dispatch is None
        assert step.flow.focus == "add_tag"

        step = publish.on_key(step.flow, key("enter"))
        assert step.flow.stage is PublishStage.CONFIRM
        assert step.dispatch is None

        step = publish.on_key(step.flow, key("enter"))
        assert step.dispatch == PublishNew(
            name="proj", visibility="private", description="", commit_message="Initial commit", tag=""
        )

    def test_tag_required_when_enabled(self) -> None:
        flow = PublishFlow(default_name="proj", stage=PublishStage.FORM, focus="add_tag")
        flow = publish.on_key(flow, key("y")).flow
        assert flow.add_tag
        assert flow.fields[-1] == "tag"

        step = publish.on_key(flow, key("tab"))
        assert step.flow.focus == "tag"
        step = publish.on_key(step.flow, key("enter"))
        assert step.flow.stage is PublishStage.FORM
        assert step.flow.validation == "tag name cannot be empty"

        step = type_text(step, "v0.1.0", publish.on_key)
        step = publish.on_key(step.flow, key("enter"))
        assert step.flow.stage is PublishStage.CONFIRM
        assert step.flow.request().tag == "v0.1.0"

    def test_visibility_toggle(self) -> None:
        flow = PublishFlow(default_name="proj", stage=PublishStage.FORM, focus="visibility")
        assert publish.on_key(flow, key("space", " ")).flow.visibility == "private"

    def test_cancel_runs_nothing(self) -> None:
        flow = PublishFlow(default_name="proj", stage=PublishStage.CONFIRM)
        step = publish.on_key(flow, key("escape"))
        assert step.dispatch is None
        assert step.exit is not None and step.exit.text == "Publish cancelled"

    def test_success_message(self) -> None:
        flow = PublishFlow(default_name="proj", stage=PublishStage.WORKING)
        step = publish.on_result(flow, Ok(PublishOutcome(url="https://github.com/me/proj")))
        assert step.exit is not None
        assert step.exit.text == "Published to https://github.com/me/proj"

        warned = publish.on_result(flow, Ok(PublishOutcome("https://github.com/me/proj", "tag v1 not created")))
        assert warned.exit is not None
        assert warned.exit.text == "Published to https://github.com/me/proj (tag v1 not created)"

    def test_auth_failure_carries_hint(self) -> None:
        flow = PublishFlow(default_name="proj", stage=PublishStage.WORKING)
        step = publish.on_result(flow, Err(HostingError("gh: executable not found")))
        assert step.flow.stage is PublishStage.ERROR
        assert step.flow.hint == AUTH_HINT

        exit_step = publish.on_key(step.flow, key("enter"))
        assert exit_step.exit is not None
        assert exit_step.exit.text == "Error: gh: executable not found"

    def test_git_identity_failure_has_no_auth_hint(self) -> None:
        flow = PublishFlow(default_name="proj", stage=PublishStage.WORKING)
        error = GitError("failed to commit: Author identity unknown\n\n*** Please tell me who you are.")
        step = publish.on_result(flow, Err(error))
        assert step.flow.stage is PublishStage.ERROR
        assert step.flow.hint is None
