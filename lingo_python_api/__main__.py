from textwrap import dedent
import inspect
import json
import sys
import re
import click
import traceback
from typing import (
    Any,
    List,
    Dict,
    Optional,
    Callable,
    Union,
    get_origin,
    get_args,
    Literal,
)
from pydantic import BaseModel, ValidationError
from loguru import logger

from .lingo_api import LingoAPI
from .lingo_error import LingoError

# Public methods that are not exposed as generated commands
SKIPPED_METHODS = {"setup", "call_api", "request_params", "search"}


# --- Serialization Helper ---
def serialize_output(data: Any) -> Any:
    """
    Recursively serialize data for JSON output, handling Pydantic models,
    lists and dicts.
    """
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json", exclude_none=True)
    elif isinstance(data, list):
        return [serialize_output(item) for item in data]
    elif isinstance(data, dict):
        return {k: serialize_output(v) for k, v in data.items()}
    return data


def emit_result(result: Any, ensure_ascii: bool) -> None:
    """Print a command result: raw bytes as-is, everything else as JSON."""
    if result is None:
        logger.debug("Operation successful (No content returned).")
    elif isinstance(result, bytes):
        stdout = click.get_binary_stream("stdout")
        stdout.write(result)
        stdout.flush()
    else:
        click.echo(
            json.dumps(serialize_output(result), indent=2, ensure_ascii=ensure_ascii)
        )


def unwrap_optional(annotation: Any) -> Any:
    """Return T for Optional[T], the annotation itself otherwise."""
    args = get_args(annotation)
    if get_origin(annotation) is Union and type(None) in args and len(args) == 2:
        return args[0] if args[1] is type(None) else args[1]
    return annotation


def is_json_annotation(annotation: Any) -> bool:
    annotation = unwrap_optional(annotation)
    return annotation in (dict, list) or get_origin(annotation) in (
        dict,
        list,
        Dict,
        List,
    )


# --- Click CLI Setup ---

# Shared options for the API client
shared_options = [
    click.option(
        "--space-id",
        envvar="LINGO_PYTHON_API_SPACE_ID",
        help="Id of the Lingo space (uses env var if not provided).",
        required=False,
    ),
    click.option(
        "--token",
        envvar="LINGO_PYTHON_API_TOKEN",
        help="Lingo API token (uses env var if not provided).",
        required=False,
    ),
    click.option(
        "--base-url",
        envvar="LINGO_PYTHON_API_BASE_URL",
        help="Override the Lingo API root URL (default: https://api.lingoapp.com/1).",
    ),
    click.option(
        "--verbose",
        "-v",
        is_flag=True,
        default=False,
        help="Enable verbose logging.",
    ),
    click.option(
        "--disable-response-validation",
        is_flag=True,
        default=False,
        envvar="LINGO_PYTHON_API_DISABLE_RESPONSE_VALIDATION",
        help="Disable Pydantic validation of API responses (returns raw data).",
    ),
    click.option(
        "--ascii",
        "ensure_ascii",
        is_flag=True,
        default=False,
        envvar="LINGO_PYTHON_API_ENSURE_ASCII",
        help="Escape non-ASCII characters in the JSON output (default: keep Unicode).",
    ),
]


def add_options(options):
    """Decorator to add a list of click options to a command."""

    def _add_options(func):
        for option in reversed(options):
            func = option(func)
        return func

    return _add_options


@click.group(context_settings=dict(help_option_names=["-h", "--help"]))
@add_options(shared_options)
@click.pass_context
def cli(
    ctx,
    space_id,
    token,
    base_url,
    verbose,
    disable_response_validation,
    ensure_ascii,
):
    """
    Lingo Python API Command Line Interface.

    Commands are generated from the methods of the LingoAPI client.
    Requires a space id and a token, through options or the
    LINGO_PYTHON_API_SPACE_ID and LINGO_PYTHON_API_TOKEN environment variables.
    """
    ctx.ensure_object(dict)

    if not space_id:
        raise click.UsageError(
            "Space id is required. Provide --space-id option or set LINGO_PYTHON_API_SPACE_ID environment variable."
        )
    if not token:
        raise click.UsageError(
            "API token is required. Provide --token option or set LINGO_PYTHON_API_TOKEN environment variable."
        )

    ctx.obj["SPACE_ID"] = space_id
    ctx.obj["TOKEN"] = token
    ctx.obj["BASE_URL"] = base_url
    ctx.obj["VERBOSE"] = verbose
    ctx.obj["DISABLE_RESPONSE_VALIDATION"] = disable_response_validation
    ctx.obj["ENSURE_ASCII"] = ensure_ascii


def make_client(ctx) -> LingoAPI:
    return LingoAPI(
        space_id=ctx.obj["SPACE_ID"],
        token=ctx.obj["TOKEN"],
        base_url=ctx.obj["BASE_URL"],
        verbose=ctx.obj["VERBOSE"],
        disable_response_validation=ctx.obj["DISABLE_RESPONSE_VALIDATION"],
    )


def run_and_report(ctx, action: Callable[[], Any]) -> None:
    """Run a client call, print its result, and turn failures into exit code 1."""
    verbose = ctx.obj["VERBOSE"]
    try:
        result = action()
    except LingoError as e:
        logger.error(f"Lingo error {e.code}: {e.message}")
        if e.details:
            logger.error(f"Details: {e.details}")
        sys.exit(1)
    except (ValueError, ValidationError, TypeError) as e:
        logger.error(f"Error: {e}")
        if verbose:
            logger.debug(traceback.format_exc())
        sys.exit(1)
    emit_result(result, ctx.obj["ENSURE_ASCII"])


def parse_docstring_args(docstring: str) -> Dict[str, str]:
    """Extract parameter descriptions from the Args section of a docstring."""
    param_descriptions = {}
    in_args_section = False
    param_name = None
    for line in docstring.split("\n"):
        stripped_line = line.strip()
        if stripped_line == "Args:":
            in_args_section = True
        elif stripped_line in ("Returns:", "Raises:"):
            in_args_section = False
        elif in_args_section and stripped_line:
            match = re.match(r"^\s+([a-zA-Z_][a-zA-Z0-9_]*):\s+(.*)$", line)
            if match:
                param_name = match.group(1)
                param_descriptions[param_name] = match.group(2).strip()
                logger.trace(
                    f"Parsed docstring param: '{param_name}' -> '{param_descriptions[param_name]}'"
                )
            elif param_name is not None:
                param_descriptions[param_name] += " " + stripped_line
    return param_descriptions


def create_click_command(
    api_method_name: str, api_method: Callable
) -> Optional[click.Command]:
    """
    Dynamically creates a Click command for a given API method,
    inspecting its signature for arguments. Returns None if creation fails.
    """
    try:
        sig = inspect.signature(api_method)
        params = [p for p in sig.parameters.values() if p.name != "self"]
    except (ValueError, TypeError) as e:
        logger.warning(f"Could not get signature for method '{api_method_name}': {e}")
        return None

    def command_func_factory(method_name, signature):
        @click.pass_context
        def command_func(ctx, **kwargs):
            """Dynamically generated command function wrapper."""
            call_args = {
                k.replace("-", "_"): v for k, v in kwargs.items() if v is not None
            }
            valid_arg_names = set(signature.parameters.keys())
            call_args = {k: v for k, v in call_args.items() if k in valid_arg_names}

            # --- JSON Parsing for Dict/List Parameters ---
            for param_name, param_sig in signature.parameters.items():
                param_value = call_args.get(param_name)
                if is_json_annotation(param_sig.annotation) and isinstance(
                    param_value, str
                ):
                    try:
                        call_args[param_name] = json.loads(param_value)
                        logger.debug(f"Parsed JSON string for parameter '{param_name}'.")
                    except json.JSONDecodeError as json_err:
                        click.echo(
                            f"Error: Invalid JSON provided for parameter '{param_name.replace('_', '-')}': {json_err}",
                            err=True,
                        )
                        click.echo(f"Provided value: {param_value}", err=True)
                        ctx.exit(1)

            api = make_client(ctx)
            instance_method = getattr(api, method_name)
            logger.debug(f"Calling API method '{method_name}' with args: {call_args}")
            run_and_report(ctx, lambda: instance_method(**call_args))

        command_func.__name__ = method_name
        return command_func

    command_func = command_func_factory(api_method_name, sig)

    # --- Add Click options based on the method signature ---
    docstring = dedent(
        api_method.__doc__ or f"Execute the {api_method_name} API operation."
    )
    help_text = " ".join(docstring.split("\n\n")[0].splitlines()).strip()
    full_help = docstring.replace("\n", "\n\n")
    param_descriptions = parse_docstring_args(docstring)

    click_params = []
    for param in params:
        param_name_cli = param.name.replace("_", "-")
        is_required_in_sig = param.default is inspect.Parameter.empty
        default_value = param.default if not is_required_in_sig else None

        annotation = param.annotation
        inner = unwrap_optional(annotation)
        if inner is not annotation:
            is_required_in_sig = False

        click_type = click.STRING
        if inner is int:
            click_type = click.INT
        elif inner is float:
            click_type = click.FLOAT
        elif inner is bool:
            click_type = click.BOOL
        elif get_origin(inner) is Literal:
            choices = get_args(inner)
            if all(isinstance(c, str) for c in choices):
                click_type = click.Choice(choices, case_sensitive=False)

        param_help = param_descriptions.get(param.name, f"Parameter '{param.name}'.")
        if is_json_annotation(annotation):
            param_help += " (Provide as JSON string)"
        elif isinstance(click_type, click.Choice):
            param_help += f" (Choices: {', '.join(click_type.choices)})"

        click_params.append(
            click.Option(
                [f"--{param_name_cli}"],
                type=click_type,
                required=is_required_in_sig,
                default=default_value,
                help=param_help,
                show_default=default_value is not None,
            )
        )

    try:
        return click.Command(
            name=api_method_name.replace("_", "-"),
            callback=command_func,
            params=click_params,
            help=full_help,
            short_help=help_text,
        )
    except Exception as e:
        logger.warning(f"Failed to create click command for '{api_method_name}': {e}")
        return None


# --- Dynamically Add Commands to CLI Group ---
def add_commands_to_cli(cli_group):
    """
    Inspects the LingoAPI class *statically* to find public methods
    and adds them as Click commands. Does not require credentials.
    """
    logger.debug("Statically inspecting LingoAPI class and generating commands...")

    added_count = 0
    skipped_count = 0
    for name, member in inspect.getmembers(LingoAPI):
        if name.startswith("_") or name in SKIPPED_METHODS:
            continue
        if not inspect.isfunction(member):
            continue
        command = create_click_command(name, member)
        if command:
            cli_group.add_command(command)
            added_count += 1
        else:
            logger.warning(f"Skipped command generation for method: {name}")
            skipped_count += 1

    if added_count == 0:
        raise click.ClickException(
            "No API commands were dynamically added. Check LingoAPI class definition and logs."
        )
    logger.debug(f"Added {added_count} API commands. Skipped {skipped_count}.")


@cli.command(name="search")
@click.option("--keyword", help="Keyword to match.")
@click.option(
    "--scope",
    type=click.Choice(["items", "assets", "kits", "sections", "headings", "tags"]),
    default="items",
    show_default=True,
    help="What to search.",
)
@click.option("--kit-id", help="Limit results to a kit.")
@click.option("--section-id", help="Limit results to a section.")
@click.option("--type", "type_", help="Limit results to an item or asset type.")
@click.option("--tag", help="Limit results to a tag.")
@click.option("--after", help="Created after this date (yyyy-mm-dd).")
@click.option("--before", help="Created before this date (yyyy-mm-dd).")
@click.option("--sort", help="Sort key, e.g. relevance, recent, alpha.")
@click.option("--reverse", is_flag=True, default=False, help="Reverse the sort.")
@click.option("--limit", type=click.INT, default=50, show_default=True)
@click.option("--offset", type=click.INT, default=0, show_default=True)
@click.pass_context
def search_command(
    ctx,
    keyword,
    scope,
    kit_id,
    section_id,
    type_,
    tag,
    after,
    before,
    sort,
    reverse,
    limit,
    offset,
):
    """
    Search the content of the space. Corresponds to GET /search.
    """
    api = make_client(ctx)

    def run():
        query = getattr(api.search(), scope)()
        if keyword:
            query.matching_keyword(keyword)
        if kit_id:
            query.in_kit(kit_id)
        if section_id:
            query.in_section(section_id)
        if type_:
            query.of_type(type_)
        if tag:
            query.with_tag(tag)
        if after and before:
            query.created_at(after=after, before=before)
        elif after:
            query.after(after)
        elif before:
            query.before(before)
        if sort:
            query.sort_by(sort, reverse)
        return query.limit(limit).offset(offset).fetch()

    run_and_report(ctx, run)


add_commands_to_cli(cli)

if __name__ == "__main__":
    cli(obj={})
