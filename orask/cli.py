"""Command-line entry point: ``orask [flags] [prompt ...]``."""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Callable, List, Optional, Sequence, TextIO

from .builder import RequestBuilder
from .client import OpenRouterClient
from .config import (
    API_KEY_ENV,
    DEFAULT_MODEL,
    MODEL_SHORTCUTS,
    InvocationOptions,
    OpenRouterConfig,
    load_env_file,
    parse_provider_order,
    resolve_model,
    resolve_system_prompt,
)
from .exceptions import LLMConfigError, LLMTransportError, LLMUpstreamError, LLMValidationError
from .models import ChatResult

logger = logging.getLogger(__name__)

ClientFactory = Callable[[OpenRouterConfig], OpenRouterClient]

_FATAL = (LLMConfigError, LLMValidationError, LLMUpstreamError, LLMTransportError)


def build_parser() -> argparse.ArgumentParser:
    shortcuts = "\n".join(f"  -{k}  {v}" for k, v in MODEL_SHORTCUTS.items())
    parser = argparse.ArgumentParser(
        prog="orask",
        description="Send a prompt to OpenRouter and print the answer.",
        epilog=(
            f"model shortcuts (last one wins, -m overrides):\n{shortcuts}\n"
            f"default model: {DEFAULT_MODEL}\n\n"
            f"The API key is read from {API_KEY_ENV} (a .env file is honoured).\n"
            "Without a prompt argument the prompt is read from standard input."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
        allow_abbrev=False,
    )
    group = parser.add_argument_group("model shortcuts")
    for key, model in MODEL_SHORTCUTS.items():
        group.add_argument(f"-{key}", dest="shortcuts", action="append_const", const=key, help=model)
    parser.add_argument("-m", dest="model", metavar="MODEL", help="custom model identifier")
    parser.add_argument("-r", dest="raw", action="store_true", help="send no default system prompt")
    parser.add_argument("-stream", action="store_true", help="stream the answer as it is generated")
    parser.add_argument("-system", metavar="TEXT", help="custom system prompt")
    parser.add_argument("-provider", metavar="LIST", help="comma-separated provider order, e.g. 'groq, together'")
    parser.add_argument("-v", dest="verbose", action="store_true", help="debug logging to stderr")
    parser.add_argument("-h", "-help", action="help", help="show this help and exit")
    parser.add_argument("prompt", nargs="*", help="prompt text (default: read from stdin)")
    return parser


def resolve_prompt(words: Sequence[str], stdin: TextIO) -> str:
    """Join positional words, falling back to stdin read to EOF and trimmed."""
    text = " ".join(words)
    if text.strip():
        return text
    text = stdin.read().strip()
    if not text:
        raise LLMValidationError("no prompt given (pass it as an argument or pipe it on stdin)")
    return text


def resolve_options(args: argparse.Namespace, stdin: TextIO) -> InvocationOptions:
    return InvocationOptions(
        model=resolve_model(args.shortcuts, args.model),
        prompt=resolve_prompt(args.prompt, stdin),
        system_prompt=resolve_system_prompt(args.raw, args.system),
        stream=args.stream,
        provider_order=parse_provider_order(args.provider),
    )


def _format_seconds(elapsed: float) -> str:
    return f"{elapsed:.2f}".rstrip("0").rstrip(".") + "s"


def format_footer(result: ChatResult) -> str:
    """``[model | provider | 2s | 5.0 tok/s]``, or ``[model | 2s]`` for streamed results."""
    if result.streamed:
        return f"[{result.model} | {_format_seconds(result.elapsed)}]"
    provider = result.provider or "unknown"
    return f"[{result.model} | {provider} | {_format_seconds(result.elapsed)} | {result.tokens_per_second:.1f} tok/s]"


def render(result: ChatResult, out: TextIO) -> None:
    if not result.streamed:
        out.write(result.content)
    if not result.content.endswith("\n"):
        out.write("\n")
    out.write(format_footer(result) + "\n")
    out.flush()


def main(
    argv: Optional[List[str]] = None,
    *,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
    stderr: Optional[TextIO] = None,
    client_factory: Optional[ClientFactory] = None,
) -> int:
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr

    args = build_parser().parse_intermixed_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")

    load_env_file()
    try:
        config = OpenRouterConfig.from_env()
        options = resolve_options(args, stdin)
        logger.debug("resolved model=%s stream=%s system_prompt=%s", options.model, options.stream, bool(options.system_prompt))
        request = RequestBuilder.build(options)
        with (client_factory or OpenRouterClient)(config) as client:
            result = client.send(request, out=stdout)
    except _FATAL as e:
        stdout.flush()
        print(f"error: {e}", file=stderr)
        return 1
    except KeyboardInterrupt:
        print("interrupted", file=stderr)
        return 130

    render(result, stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
