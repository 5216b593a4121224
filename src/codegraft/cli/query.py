"""graft query commands - dependency graph lookups."""

from pathlib import Path

import click

from codegraft.cli.utils import (
    echo_json,
    handle_errors,
    json_option,
    load_project,
    open_store,
    root_option,
)
from codegraft.graph import DependencyIndex, GraphQueryEngine
from codegraft.graph.index import Dependency


def _engine(ctx: click.Context, root: Path | None) -> tuple[GraphQueryEngine, int]:
    project_root, config = load_project(ctx, root)
    with open_store(project_root, config) as store:
        index = DependencyIndex.from_store(store)
    return GraphQueryEngine(index), config.graph.default_max_hops


def _print_dependencies(identity: str, deps: list[Dependency], as_json: bool) -> None:
    if as_json:
        echo_json({"identity": identity, "dependencies": [d.to_dict() for d in deps]})
        return
    for dep in deps:
        location = f"  ({dep.source_location})" if dep.source_location else ""
        click.echo(f"{dep.edge_kind}\t{dep.identity}{location}")


def _print_distances(identity: str, reached: dict[str, int], as_json: bool) -> None:
    ordered = sorted(reached.items(), key=lambda kv: (kv[1], kv[0]))
    if as_json:
        reached_list = [{"identity": i, "hops": h} for i, h in ordered]
        echo_json({"identity": identity, "reached": reached_list})
        return
    for other, hops in ordered:
        click.echo(f"{hops}\t{other}")


@click.group()
def query_group() -> None:
    """Query the dependency graph."""


@query_group.command("forward")
@click.argument("identity")
@root_option
@json_option
@click.pass_context
@handle_errors
def forward_command(ctx: click.Context, identity: str, root: Path | None, as_json: bool) -> None:
    """Entities IDENTITY depends on directly."""
    engine, _ = _engine(ctx, root)
    _print_dependencies(identity, engine.forward_dependencies(identity), as_json)


@query_group.command("reverse")
@click.argument("identity")
@root_option
@json_option
@click.pass_context
@handle_errors
def reverse_command(ctx: click.Context, identity: str, root: Path | None, as_json: bool) -> None:
    """Entities that depend on IDENTITY directly."""
    engine, _ = _engine(ctx, root)
    _print_dependencies(identity, engine.reverse_dependencies(identity), as_json)


@query_group.command("blast")
@click.argument("identity")
@click.option("--max-hops", type=click.IntRange(min=0), default=None, help="Default: from config")
@click.option("--unbounded", is_flag=True, help="No hop limit")
@click.option("--reverse", "reverse", is_flag=True, help="Follow edges backwards (who is affected)")
@root_option
@json_option
@click.pass_context
@handle_errors
def blast_command(
    ctx: click.Context,
    identity: str,
    max_hops: int | None,
    unbounded: bool,
    reverse: bool,
    root: Path | None,
    as_json: bool,
) -> None:
    """Entities within a hop limit of IDENTITY, with their distance."""
    if unbounded and max_hops is not None:
        raise click.UsageError("--max-hops and --unbounded are mutually exclusive")
    engine, default_hops = _engine(ctx, root)
    hops = None if unbounded else (max_hops if max_hops is not None else default_hops)
    if reverse:
        reached = engine.reverse_blast_radius(identity, hops)
    else:
        reached = engine.blast_radius(identity, hops)
    _print_distances(identity, reached, as_json)


@query_group.command("closure")
@click.argument("identity")
@root_option
@json_option
@click.pass_context
@handle_errors
def closure_command(ctx: click.Context, identity: str, root: Path | None, as_json: bool) -> None:
    """Every entity IDENTITY depends on, transitively."""
    engine, _ = _engine(ctx, root)
    closure = sorted(engine.transitive_closure(identity))
    if as_json:
        echo_json({"identity": identity, "closure": closure})
        return
    for other in closure:
        click.echo(other)


@query_group.command("cycles")
@root_option
@json_option
@click.pass_context
@handle_errors
def cycles_command(ctx: click.Context, root: Path | None, as_json: bool) -> None:
    """Dependency cycles (strongly connected components)."""
    engine, _ = _engine(ctx, root)
    cycles = engine.find_cycles()
    if as_json:
        echo_json({"cycles": cycles})
        return
    for cycle in cycles:
        click.echo(" -> ".join([*cycle, cycle[0]]))


@query_group.command("stats")
@root_option
@json_option
@click.pass_context
@handle_errors
def stats_command(ctx: click.Context, root: Path | None, as_json: bool) -> None:
    """Graph size, degree and cycle counts."""
    engine, _ = _engine(ctx, root)
    stats = engine.statistics()
    if as_json:
        echo_json(stats.to_dict())
        return
    click.echo(f"Nodes: {stats.nodes}")
    click.echo(f"Edges: {stats.edges}")
    for kind, count in sorted(stats.edges_by_kind.items()):
        click.echo(f"  {kind}: {count}")
    click.echo(f"Max out-degree: {stats.max_out_degree}")
    click.echo(f"Max in-degree: {stats.max_in_degree}")
    click.echo(f"Cycles: {stats.cycles}")
