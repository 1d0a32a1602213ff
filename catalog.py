"""
Static catalog of the XRPC methods the console knows how to build.

The catalog is read-only: every other component looks entries up here and
never mutates them. Parameter order is the positional order in which the
command builder prompts for values.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class Parameter:
    name: str
    description: str
    optional: bool = False
    default: Optional[str] = None


@dataclass(frozen=True)
class XrpcCommand:
    method: str
    description: str
    parameters: Tuple[Parameter, ...] = ()
    encoding: str = "application/json"


AVAILABLE_COMMANDS: Tuple[XrpcCommand, ...] = (
    XrpcCommand(
        method="app.bsky.actor.getProfile",
        description="Get an actor's profile details",
        parameters=(
            Parameter("actor", "The handle or DID of the actor"),
        ),
    ),
    XrpcCommand(
        method="app.bsky.feed.getTimeline",
        description="Get the user's home timeline",
        parameters=(
            Parameter("limit", "Number of results to return", optional=True, default="50"),
            Parameter("cursor", "Pagination cursor from previous response", optional=True),
        ),
    ),
    XrpcCommand(
        method="com.atproto.identity.resolveHandle",
        description="Resolve a handle (domain name) to a DID",
        parameters=(
            Parameter("handle", "The handle to resolve"),
        ),
    ),
    XrpcCommand(
        method="app.bsky.feed.getPostThread",
        description="Get a thread of posts by a post URI",
        parameters=(
            Parameter("uri", "The URI of the post used as entry point"),
            Parameter(
                "depth",
                "How many levels of reply depth should be included in the response",
                optional=True,
                default="6",
            ),
            Parameter(
                "parentHeight",
                "How many levels of parent (and grandparent, etc) post to include",
                optional=True,
                default="80",
            ),
        ),
    ),
    XrpcCommand(
        method="app.bsky.feed.getAuthorFeed",
        description="Get a feed of posts by an actor",
        parameters=(
            Parameter("actor", "The handle or DID of the author"),
            Parameter("limit", "Number of results", optional=True, default="50"),
            Parameter("cursor", "Pagination cursor", optional=True),
        ),
    ),
    XrpcCommand(
        method="app.bsky.graph.getFollowers",
        description="Get a list of an actor's followers",
        parameters=(
            Parameter("actor", "The handle or DID of the actor"),
            Parameter("limit", "Number of results", optional=True, default="50"),
            Parameter("cursor", "Pagination cursor", optional=True),
        ),
    ),
    XrpcCommand(
        method="com.atproto.server.describeServer",
        description="Describes the server's account creation requirements and capabilities.",
    ),
    XrpcCommand(
        method="com.atproto.sync.listBlobs",
        description="List of blob CIDs for an account",
        parameters=(
            Parameter("did", "The handle or DID of the actor"),
            Parameter("since", "optional revision of repo to list blobs since", optional=True),
            Parameter("limit", "Number of results", optional=True, default="500"),
            Parameter("cursor", "Pagination cursor", optional=True),
        ),
    ),
)


def find_command(method: str) -> Optional[XrpcCommand]:
    """Return the catalog entry for ``method`` or None."""
    for command in AVAILABLE_COMMANDS:
        if command.method == method:
            return command
    return None


def method_names() -> List[str]:
    return [command.method for command in AVAILABLE_COMMANDS]


def describe_parameter(param: Parameter) -> str:
    if param.optional:
        return f"{param.description} (optional, default: {param.default or 'none'})"
    return param.description
