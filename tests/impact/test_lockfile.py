"""Lockfile parsing and pod-level diffing."""

from __future__ import annotations

import pytest

from projgen.errors import LockfileParseError
from projgen.impact.lockfile import Lockfile, SourceType, changed_pods

CDN = """\
https://cdn.cocoapods.org/:
  type: cdn
  pods:
    Alamofire:
      hash: abc
      version: 5.8.0
    abseil:
      version: 1.2
      subspecs: [base, time]
"""


def test_parse_coerces_numeric_versions() -> None:
    lockfile = Lockfile.from_text(CDN, "HEAD:Cocoapods.lock")

    source = lockfile.pods_by_source["https://cdn.cocoapods.org/"]
    assert source.type == SourceType.CDN
    assert source.pods["abseil"].version == "1.2"
    assert source.pods["Alamofire"].version == "5.8.0"


def test_parse_coerces_numeric_refs_hashes_and_subspecs() -> None:
    text = (
        "https://github.com/org/Specs.git:\n"
        "  type: git\n"
        "  ref: 2.0\n"
        "  pods:\n"
        "    Networking:\n"
        "      hash: 1234567\n"
        "      version: 3\n"
        "      subspecs: [Core, 2]\n"
    )

    source = Lockfile.from_text(text, "HEAD:Cocoapods.lock").pods_by_source[
        "https://github.com/org/Specs.git"
    ]

    assert source.ref == "2.0"
    pod = source.pods["Networking"]
    assert (pod.hash, pod.version, pod.subspecs) == ("1234567", "3", ["Core", "2"])


def test_numeric_ref_change_is_detected() -> None:
    template = "git:\n  type: git\n  ref: {}\n  pods:\n    Networking:\n      version: 1.0\n"
    original = Lockfile.from_text(template.format("2.0"), "a")
    new = Lockfile.from_text(template.format("2.1"), "b")

    assert changed_pods(original, new) == {"Networking"}


def test_empty_document_is_empty_lockfile() -> None:
    assert Lockfile.from_text("", "HEAD:Cocoapods.lock") == Lockfile.empty()


def test_source_without_pods() -> None:
    lockfile = Lockfile.from_text("local:\n  type: path\n  pods:\n", "x")

    assert lockfile.pods_by_source["local"].pods == {}


@pytest.mark.parametrize(
    "text",
    [
        "a: [unterminated",
        "- just\n- a list\n",
        "https://cdn.cocoapods.org/:\n  type: ftp\n",
    ],
)
def test_invalid_lockfile_raises(text: str) -> None:
    with pytest.raises(LockfileParseError) as excinfo:
        Lockfile.from_text(text, "origin/main:Cocoapods.lock")

    assert excinfo.value.location == "origin/main:Cocoapods.lock"


def test_version_bump_is_detected() -> None:
    original = Lockfile.from_text(CDN, "a")
    new = Lockfile.from_text(CDN.replace("5.8.0", "5.9.0"), "b")

    assert changed_pods(original, new) == {"Alamofire"}


def test_subspec_change_is_detected() -> None:
    original = Lockfile.from_text(CDN, "a")
    new = Lockfile.from_text(CDN.replace("[base, time]", "[base]"), "b")

    assert changed_pods(original, new) == {"abseil"}


def test_added_and_removed_pods_are_detected_both_ways() -> None:
    original = Lockfile.from_text(CDN, "a")
    new = Lockfile.from_text(
        CDN + "    Kingfisher:\n      version: 7.0.0\n", "b"
    )

    assert changed_pods(original, new) == {"Kingfisher"}
    assert changed_pods(new, original) == {"Kingfisher"}


def test_ref_change_marks_every_pod_of_the_source() -> None:
    text = (
        "https://github.com/org/Specs.git:\n"
        "  type: git\n"
        "  ref: aaaa\n"
        "  pods:\n"
        "    Networking:\n"
        "      version: 1.0.0\n"
        "    Storage:\n"
        "      version: 1.0.0\n"
    )
    original = Lockfile.from_text(text, "a")
    new = Lockfile.from_text(text.replace("aaaa", "bbbb"), "b")

    assert changed_pods(original, new) == {"Networking", "Storage"}


def test_removed_source_marks_its_pods() -> None:
    original = Lockfile.from_text(CDN, "a")

    assert changed_pods(original, Lockfile.empty()) == {"Alamofire", "abseil"}
    assert changed_pods(Lockfile.empty(), original) == {"Alamofire", "abseil"}


def test_identical_lockfiles_have_no_changes() -> None:
    assert changed_pods(Lockfile.from_text(CDN, "a"), Lockfile.from_text(CDN, "b")) == set()
