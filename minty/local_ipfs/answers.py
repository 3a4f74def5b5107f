"""
Answer resolution for the mint command.

Fields given on the command line win. Whatever is still missing is asked
for in one interactive session, in declaration order. Options that are not
declared fields (owner, creation-info) are carried through untouched.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Callable, Optional

from rich.console import Console
from rich.prompt import Prompt

from minty.local_ipfs.errors import InteractionError


@dataclass(frozen=True)
class FieldSpec:
    """One answer field: its key and the prompt shown when it is missing."""

    key: str
    message: str


MINT_FIELDS = (
    FieldSpec("name", "Enter a name for your new NFT"),
    FieldSpec("description", "Enter a description for your new NFT"),
)


@dataclass
class AnswerSet:
    """Declared field answers in `values`; undeclared CLI options in `extras`."""

    values: dict = field(default_factory=dict)
    extras: dict = field(default_factory=dict)

    def __getitem__(self, key):
        if key in self.values:
            return self.values[key]
        return self.extras[key]

    def __contains__(self, key):
        return key in self.values or key in self.extras

    def get(self, key, default=None):
        try:
            return self[key]
        except KeyError:
            return default

    def as_dict(self) -> dict:
        merged = dict(self.extras)
        merged.update(self.values)
        return merged


# A prompter receives the pending specs and returns {key: answer}.
Prompter = Callable[[list], dict]


class ConsolePrompter:
    """Ask pending fields on the terminal, one after another."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def __call__(self, pending: list) -> dict:
        return {spec.key: Prompt.ask(spec.message, console=self.console) for spec in pending}


def _ordered_specs(specs) -> list:
    if isinstance(specs, Mapping):
        return [
            spec if spec.key == key else FieldSpec(key, spec.message)
            for key, spec in specs.items()
        ]
    return list(specs)


def resolve(cli_options: Mapping, specs, prompter: Optional[Prompter] = None) -> AnswerSet:
    """Merge CLI values with interactively collected ones.

    A truthy CLI value for a declared field is used as-is and never
    prompted for. The remaining fields go to ``prompter`` in a single
    call. Undeclared CLI keys land in ``extras`` unless their value is
    None (not supplied).

    Raises:
        InteractionError: the session was aborted or came back without
            one of the requested answers.
    """
    ordered = _ordered_specs(specs)
    declared = {spec.key for spec in ordered}

    result = AnswerSet()
    pending = []
    for spec in ordered:
        value = cli_options.get(spec.key)
        if value:
            result.values[spec.key] = value
        else:
            pending.append(spec)

    if pending:
        if prompter is None:
            prompter = ConsolePrompter()
        try:
            answers = prompter(pending)
        except (EOFError, KeyboardInterrupt) as e:
            raise InteractionError("Answer session aborted") from e
        for spec in pending:
            if spec.key not in answers:
                raise InteractionError(f"No answer given for '{spec.key}'")
            answer = answers[spec.key]
            result.values[spec.key] = "" if answer is None else str(answer)

    # Keep declaration order in the final mapping.
    result.values = {spec.key: result.values[spec.key] for spec in ordered}

    for key, value in cli_options.items():
        if key not in declared and value is not None:
            result.extras[key] = value

    return result
