"""Unit tests for RenameAwareCorrelator using a fake repository."""

from unittest.mock import Mock

import pytest

from git_warp_time.errors import RepositoryAccessError
from git_warp_time.services.correlator import RenameAwareCorrelator
from git_warp_time.services.repository import Commit, Delta


def added(path, fingerprint):
    return Delta(None, None, path, fingerprint, "A")


def modified(path, old_fingerprint, new_fingerprint):
    return Delta(path, old_fingerprint, path, new_fingerprint, "M")


def renamed(old_path, new_path, fingerprint):
    return Delta(old_path, fingerprint, new_path, fingerprint, "R")


def deleted(path, fingerprint):
    return Delta(path, fingerprint, None, None, "D")


C2 = Commit(sha="c2" * 20, timestamp=300, parent="c1" * 20)
C1 = Commit(sha="c1" * 20, timestamp=200, parent="c0" * 20)
C0 = Commit(sha="c0" * 20, timestamp=100, parent=None)


def fake_repo(diffs):
    """Repository whose diff_to_parent answers from a commit -> deltas mapping."""
    repo = Mock()
    repo.diff_to_parent.side_effect = lambda commit: diffs[commit]
    return repo


def run(correlator, candidates, head_files, commits=(C2, C1, C0)):
    return {r.path: r.commit for r in correlator.correlate(candidates, head_files, commits)}


class TestRenameAwareCorrelator:
    def test_newest_matching_commit_wins(self):
        repo = fake_repo(
            {
                C2: [modified("f.txt", "fp1", "fp2")],
                C1: [modified("f.txt", "fp0", "fp1")],
                C0: [added("f.txt", "fp0")],
            }
        )
        correlator = RenameAwareCorrelator(repo)

        resolved = run(correlator, ["f.txt"], {"f.txt": "fp2"})

        assert resolved == {"f.txt": C2}
        assert correlator.unresolved == []

    def test_walk_stops_once_every_candidate_is_resolved(self):
        repo = fake_repo({C2: [added("f.txt", "fp")], C1: [], C0: []})
        correlator = RenameAwareCorrelator(repo)

        run(correlator, ["f.txt"], {"f.txt": "fp"})

        repo.diff_to_parent.assert_called_once_with(C2)
        assert correlator.commits_examined == 1

    def test_unchanged_file_resolves_at_older_commit(self):
        repo = fake_repo(
            {
                C2: [modified("g.txt", "g1", "g2")],
                C1: [],
                C0: [added("f.txt", "f0"), added("g.txt", "g1")],
            }
        )

        resolved = run(
            RenameAwareCorrelator(repo), ["f.txt", "g.txt"], {"f.txt": "f0", "g.txt": "g2"}
        )

        assert resolved == {"f.txt": C0, "g.txt": C2}

    def test_rename_resolves_at_rename_commit(self):
        repo = fake_repo(
            {C2: [], C1: [renamed("a.txt", "b.txt", "fp")], C0: [added("a.txt", "fp")]}
        )

        resolved = run(RenameAwareCorrelator(repo), ["b.txt"], {"b.txt": "fp"})

        assert resolved == {"b.txt": C1}

    def test_unmatched_entry_keeps_head_identity_for_older_commits(self):
        # C2 changes b.txt to unrelated content; the candidate still looks for
        # its HEAD fingerprint at b.txt and does not follow the old side
        repo = fake_repo(
            {
                C2: [Delta("a.txt", "old", "b.txt", "other", "R")],
                C1: [added("a.txt", "fp")],
                C0: [added("b.txt", "fp")],
            }
        )
        correlator = RenameAwareCorrelator(repo)

        resolved = run(correlator, ["b.txt"], {"b.txt": "fp"})

        assert resolved == {"b.txt": C0}

    def test_duplicate_content_under_different_paths(self):
        repo = fake_repo(
            {
                C2: [added("copy.txt", "same")],
                C1: [],
                C0: [added("orig.txt", "same")],
            }
        )

        resolved = run(
            RenameAwareCorrelator(repo),
            ["orig.txt", "copy.txt"],
            {"orig.txt": "same", "copy.txt": "same"},
        )

        assert resolved == {"copy.txt": C2, "orig.txt": C0}

    def test_duplicate_matching_deltas_resolve_once(self):
        repo = fake_repo({C2: [added("f.txt", "fp"), added("f.txt", "fp")]})

        resolutions = list(
            RenameAwareCorrelator(repo).correlate(["f.txt"], {"f.txt": "fp"}, [C2])
        )

        assert [r.path for r in resolutions] == ["f.txt"]

    def test_deletions_never_match(self):
        repo = fake_repo({C2: [deleted("f.txt", "fp")], C1: [], C0: []})
        correlator = RenameAwareCorrelator(repo)

        resolved = run(correlator, ["f.txt"], {"f.txt": "fp"})

        assert resolved == {}
        assert correlator.unresolved == ["f.txt"]
        assert correlator.commits_examined == 3

    def test_same_path_with_different_content_is_not_a_match(self):
        repo = fake_repo({C2: [], C1: [], C0: [added("f.txt", "other")]})
        correlator = RenameAwareCorrelator(repo)

        assert run(correlator, ["f.txt"], {"f.txt": "fp"}) == {}
        assert correlator.unresolved == ["f.txt"]

    def test_resolution_exposes_commit_timestamp(self):
        repo = fake_repo({C1: [added("f.txt", "fp")]})

        (resolution,) = RenameAwareCorrelator(repo).correlate(
            ["f.txt"], {"f.txt": "fp"}, [C1]
        )

        assert resolution.timestamp == 200

    def test_candidate_missing_from_head_listing_is_resolved_through_repo(self):
        repo = fake_repo({C0: [added("f.txt", "fp")]})
        repo.resolve_fingerprint.return_value = "fp"

        resolved = run(RenameAwareCorrelator(repo), ["f.txt"], {}, commits=[C0])

        repo.resolve_fingerprint.assert_called_once_with("f.txt", "HEAD")
        assert resolved == {"f.txt": C0}

    def test_non_regular_candidate_fails(self):
        repo = fake_repo({})
        repo.resolve_fingerprint.side_effect = RepositoryAccessError("not a file")

        with pytest.raises(RepositoryAccessError):
            run(RenameAwareCorrelator(repo), ["dir"], {})

    def test_no_candidates_examines_no_commits(self):
        repo = fake_repo({})
        correlator = RenameAwareCorrelator(repo)

        assert run(correlator, [], {}) == {}
        repo.diff_to_parent.assert_not_called()
