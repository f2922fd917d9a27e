"""Usage text for orgadmin commands."""

from typing import Dict, Optional

from .matching import first_match

COMMON_OPTIONS = (
    "Options:\n"
    "  --data <root>      Data directory, otherwise $ORGADMIN_DATA\n"
    "  --verbose/--quiet  Turn confirmation output on or off\n"
    "  --set NAME=VALUE   Temporary configuration override\n"
    "  --debug            Debug mode generates lots of diagnostics\n"
)

COMMAND_HELP: Dict[str, str] = {
    "add": (
        "\n"
        "orgadmin add --data <root> [options] org <org> [<org> ...]\n"
        "orgadmin add --data <root> [options] group <org> <group> [<group> ...]\n"
        "orgadmin add --data <root> [options] user <org> <user> [<user> ...]\n"
        "\n"
        "Creates new organizations, groups or users. Each new user is given a\n"
        "key, which is printed once and must be handed to that user.\n"
        "\n"
        + COMMON_OPTIONS
    ),
    "remove": (
        "\n"
        "orgadmin remove --data <root> [options] org <org> [<org> ...]\n"
        "orgadmin remove --data <root> [options] group <org> <group> [<group> ...]\n"
        "orgadmin remove --data <root> [options] user <org> <user> [<user> ...]\n"
        "\n"
        "Deletes organizations, groups or users.  Permanently.\n"
        "\n"
        + COMMON_OPTIONS
    ),
    "suspend": (
        "\n"
        "orgadmin suspend --data <root> [options] org <org> [<org> ...]\n"
        "orgadmin suspend --data <root> [options] group <org> <group> [<group> ...]\n"
        "orgadmin suspend --data <root> [options] user <org> <user> [<user> ...]\n"
        "\n"
        "Suspends organizations, groups or users.\n"
        "\n"
        + COMMON_OPTIONS
    ),
    "resume": (
        "\n"
        "orgadmin resume --data <root> [options] org <org> [<org> ...]\n"
        "orgadmin resume --data <root> [options] group <org> <group> [<group> ...]\n"
        "orgadmin resume --data <root> [options] user <org> <user> [<user> ...]\n"
        "\n"
        "Resumes, or un-suspends organizations, groups or users.\n"
        "\n"
        + COMMON_OPTIONS
    ),
    "init": (
        "\n"
        "orgadmin init --data <root>\n"
        "\n"
        "Initializes a data root: creates <root>/orgs and a default\n"
        "<root>/config.  The <root> directory must already exist.\n"
        "\n"
    ),
    "list": (
        "\n"
        "orgadmin list --data <root> [<org>]\n"
        "\n"
        "Lists organizations, or the groups and users of <org>, with their\n"
        "active or suspended state.\n"
        "\n"
    ),
    "help": (
        "\n"
        "orgadmin help [<command>]\n"
        "\n"
        "Shows usage for <command>, or a summary of all commands.\n"
        "\n"
    ),
}

SUMMARY = (
    "\n"
    "Usage: orgadmin --version\n"
    "       orgadmin --help\n"
    "       orgadmin help [<command>]\n"
    "\n"
    "Commands:\n"
    "       orgadmin add --data <root> [options] org <org>\n"
    "       orgadmin add --data <root> [options] group <org> <group>\n"
    "       orgadmin add --data <root> [options] user <org> <user>\n"
    "       orgadmin init --data <root>\n"
    "       orgadmin list --data <root> [<org>]\n"
    "       orgadmin remove --data <root> [options] org <org>\n"
    "       orgadmin remove --data <root> [options] group <org> <group>\n"
    "       orgadmin remove --data <root> [options] user <org> <user>\n"
    "       orgadmin resume --data <root> [options] org <org>\n"
    "       orgadmin resume --data <root> [options] group <org> <group>\n"
    "       orgadmin resume --data <root> [options] user <org> <user>\n"
    "       orgadmin suspend --data <root> [options] org <org>\n"
    "       orgadmin suspend --data <root> [options] group <org> <group>\n"
    "       orgadmin suspend --data <root> [options] user <org> <user>\n"
    "\n"
    "Each command accepts several names after <org>, processed in order;\n"
    "the first failure stops the command.  Commands and the org/group/user\n"
    "keywords may be abbreviated to three or more characters.\n"
    "\n"
    + COMMON_OPTIONS
)


def render_help(command: Optional[str] = None) -> str:
    """Return usage text for ``command``, or the summary if none is given."""
    if not command:
        return SUMMARY

    name = first_match(command, COMMAND_HELP)
    if name is None:
        return f"No help for '{command}'.\n"
    return COMMAND_HELP[name]
