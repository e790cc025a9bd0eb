"""The permission catalog and the generator that builds it from a permission file."""

from __future__ import annotations

import argparse
import sys
from enum import Enum
from typing import Any, Mapping, Sequence

import yaml

DEFAULT_PERMISSION_FILE = "../meta/permission.yml"

PermissionTree = Mapping[str, Any]


class TPermission(str, Enum):
    """Every valid permission string."""

    AgendaItemCanManage = "agenda_item.can_manage"
    AgendaItemCanSee = "agenda_item.can_see"
    AgendaItemCanSeeInternal = "agenda_item.can_see_internal"
    AssignmentCanManage = "assignment.can_manage"
    AssignmentCanNominateOther = "assignment.can_nominate_other"
    AssignmentCanNominateSelf = "assignment.can_nominate_self"
    AssignmentCanSee = "assignment.can_see"
    ChatCanManage = "chat.can_manage"
    ListOfSpeakersCanBeSpeaker = "list_of_speakers.can_be_speaker"
    ListOfSpeakersCanManage = "list_of_speakers.can_manage"
    ListOfSpeakersCanManageModeratorNotes = "list_of_speakers.can_manage_moderator_notes"
    ListOfSpeakersCanSee = "list_of_speakers.can_see"
    ListOfSpeakersCanSeeModeratorNotes = "list_of_speakers.can_see_moderator_notes"
    MediafileCanManage = "mediafile.can_manage"
    MediafileCanSee = "mediafile.can_see"
    MeetingCanManageLogosAndFonts = "meeting.can_manage_logos_and_fonts"
    MeetingCanManageSettings = "meeting.can_manage_settings"
    MeetingCanSeeAutopilot = "meeting.can_see_autopilot"
    MeetingCanSeeFrontpage = "meeting.can_see_frontpage"
    MeetingCanSeeHistory = "meeting.can_see_history"
    MeetingCanSeeLivestream = "meeting.can_see_livestream"
    MotionCanCreate = "motion.can_create"
    MotionCanCreateAmendments = "motion.can_create_amendments"
    MotionCanForward = "motion.can_forward"
    MotionCanManage = "motion.can_manage"
    MotionCanManageMetadata = "motion.can_manage_metadata"
    MotionCanManagePolls = "motion.can_manage_polls"
    MotionCanSee = "motion.can_see"
    MotionCanSeeInternal = "motion.can_see_internal"
    MotionCanSeeOrigin = "motion.can_see_origin"
    MotionCanSupport = "motion.can_support"
    PollCanManage = "poll.can_manage"
    PollCanSeeProgress = "poll.can_see_progress"
    ProjectorCanManage = "projector.can_manage"
    ProjectorCanSee = "projector.can_see"
    TagCanManage = "tag.can_manage"
    UserCanEditOwnDelegation = "user.can_edit_own_delegation"
    UserCanManage = "user.can_manage"
    UserCanManagePresence = "user.can_manage_presence"
    UserCanSee = "user.can_see"
    UserCanSeeSensitiveData = "user.can_see_sensitive_data"
    UserCanUpdate = "user.can_update"

    def __str__(self) -> str:
        return self.value


_DERIVATE: dict[str, tuple[str, ...]] = {
    "agenda_item.can_manage": ("agenda_item.can_see", "agenda_item.can_see_internal"),
    "agenda_item.can_see": (),
    "agenda_item.can_see_internal": ("agenda_item.can_see",),
    "assignment.can_manage": ("assignment.can_nominate_other", "assignment.can_see"),
    "assignment.can_nominate_other": ("assignment.can_see",),
    "assignment.can_nominate_self": ("assignment.can_see",),
    "assignment.can_see": (),
    "chat.can_manage": (),
    "list_of_speakers.can_be_speaker": (),
    "list_of_speakers.can_manage": ("list_of_speakers.can_see",),
    "list_of_speakers.can_manage_moderator_notes": ("list_of_speakers.can_see_moderator_notes",),
    "list_of_speakers.can_see": (),
    "list_of_speakers.can_see_moderator_notes": (),
    "mediafile.can_manage": ("mediafile.can_see",),
    "mediafile.can_see": (),
    "meeting.can_manage_logos_and_fonts": (),
    "meeting.can_manage_settings": (),
    "meeting.can_see_autopilot": (),
    "meeting.can_see_frontpage": (),
    "meeting.can_see_history": (),
    "meeting.can_see_livestream": (),
    "motion.can_create": ("motion.can_see",),
    "motion.can_create_amendments": ("motion.can_see",),
    "motion.can_forward": ("motion.can_see",),
    "motion.can_manage": (
        "motion.can_create",
        "motion.can_create_amendments",
        "motion.can_forward",
        "motion.can_manage_metadata",
        "motion.can_manage_polls",
        "motion.can_see",
        "motion.can_see",
        "motion.can_see",
        "motion.can_see",
        "motion.can_see",
        "motion.can_see",
        "motion.can_see_internal",
    ),
    "motion.can_manage_metadata": ("motion.can_see",),
    "motion.can_manage_polls": ("motion.can_see",),
    "motion.can_see": (),
    "motion.can_see_internal": ("motion.can_see",),
    "motion.can_see_origin": ("motion.can_see",),
    "motion.can_support": ("motion.can_see",),
    "poll.can_manage": ("poll.can_see_progress",),
    "poll.can_see_progress": (),
    "projector.can_manage": ("projector.can_see",),
    "projector.can_see": (),
    "tag.can_manage": (),
    "user.can_edit_own_delegation": ("user.can_see",),
    "user.can_manage": (
        "user.can_manage_presence",
        "user.can_see",
        "user.can_see",
        "user.can_see_sensitive_data",
        "user.can_update",
    ),
    "user.can_manage_presence": ("user.can_see",),
    "user.can_see": (),
    "user.can_see_sensitive_data": ("user.can_see",),
    "user.can_update": ("user.can_see", "user.can_see_sensitive_data"),
}

DERIVATE_PERMS: dict[TPermission, tuple[TPermission, ...]] = {
    TPermission(key): tuple(TPermission(p) for p in values) for key, values in _DERIVATE.items()
}


def derived_permissions(perm: str) -> tuple[TPermission, ...]:
    """Return the permissions implied by a permission; unknown ones imply none."""
    try:
        key = TPermission(perm)
    except ValueError:
        return ()
    return DERIVATE_PERMS.get(key, ())


def _children(node: Any) -> dict[str, Any]:
    """Return the sub-permissions of a node, treating an empty node as a leaf."""
    if node is None:
        return {}
    if isinstance(node, Mapping):
        return dict(node)
    raise ValueError(f"permission node must be a mapping, got {node!r}")


def sub_perms(tree: Any, collection: str) -> list[str]:
    """Return every permission below a node, depth first, prefixed by the collection."""
    out: list[str] = []
    for name, child in _children(tree).items():
        out.append(f"{collection}.{name}")
        out.extend(sub_perms(child, collection))
    return out


def _collect(tree: Any, collection: str, out: dict[str, list[str]]) -> None:
    for name, child in _children(tree).items():
        out[f"{collection}.{name}"] = sub_perms(child, collection)
        _collect(child, collection, out)


def derivative(tree: PermissionTree) -> dict[str, list[str]]:
    """Map each permission of a collection tree to the sorted permissions it implies."""
    out: dict[str, list[str]] = {}
    for collection, node in _children(tree).items():
        _collect(node, str(collection), out)
    return {key: sorted(values) for key, values in out.items()}


def const_name(perm: str) -> str:
    """Turn a permission string like "agenda_item.can_see" into "AgendaItemCanSee"."""
    if not perm:
        raise ValueError("permission must not be empty")
    parts = perm.replace(".", "_").split("_")
    return "".join(part[:1].upper() + part[1:] for part in parts)


def _render(tree: PermissionTree) -> str:
    derivate = derivative(tree)
    consts = {const_name(perm): perm for perm in derivate}

    lines = [
        '"""Permission catalog generated from the permission definitions. Do not edit."""',
        "",
        "from enum import Enum",
        "",
        "",
        "class TPermission(str, Enum):",
        '    """Every valid permission string."""',
        "",
    ]
    lines.extend(f'    {name} = "{consts[name]}"' for name in sorted(consts))
    lines.extend(["", "", "DERIVATE_PERMS = {"])
    for key in sorted(derivate):
        values = "".join(f'"{value}", ' for value in derivate[key])
        lines.append(f'    "{key}": ({values.rstrip()}),')
    lines.append("}")
    return "\n".join(lines) + "\n"


def _load(path: str) -> PermissionTree:
    with open(path, encoding="utf-8") as handle:
        document = yaml.safe_load(handle)
    if document is None:
        return {}
    if not isinstance(document, Mapping):
        raise ValueError(f"decoding yaml: expected a mapping, got {document!r}")
    return document


def main(argv: Sequence[str] | None = None) -> int:
    """Write the permission catalog for a permission file to standard output."""
    parser = argparse.ArgumentParser(description="Generate the permission catalog.")
    parser.add_argument("path", nargs="?", default=DEFAULT_PERMISSION_FILE)
    args = parser.parse_args(argv)

    try:
        tree = _load(args.path)
        text = _render(tree)
    except OSError as err:
        print(f"Error: open permissions file: {err}", file=sys.stderr)
        return 1
    except (yaml.YAMLError, ValueError) as err:
        print(f"Error: decoding yaml: {err}", file=sys.stderr)
        return 1

    sys.stdout.write(text)
    return 0


if __name__ == "__main__":
    sys.exit(main())