from __future__ import annotations

import pathlib
import warnings
from typing import Callable

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from threadform._config import get_unit_settings
from threadform.io.stl import write_stl
from threadform.mesh import Mesh, analyze_mesh
from threadform.mesh_quality import MeshQuality
from threadform.modeling import (
    StandardThread,
    ThreadingError,
    acme_profile,
    boolean_intersection,
    buttress_profile,
    generic_threaded_nut,
    generic_threaded_rod,
    iso_profile,
    lookup_standard_thread,
    make_cylinder,
    square_profile,
    thread_helix,
    trapezoidal_profile,
)
from threadform.modeling.csg import BooleanOperationError
from threadform.printability import warn_min_feature

console = Console()
app = typer.Typer(help="Generate threaded rods, nuts and thread helices as STL.")

_PROFILES: dict[str, Callable[[], tuple[tuple[float, float], ...]]] = {
    "iso": iso_profile,
    "trapezoidal": trapezoidal_profile,
    "acme": acme_profile,
    "square": square_profile,
    "buttress": buttress_profile,
}


def _next_available_path(path: pathlib.Path) -> pathlib.Path:
    """Return a non-conflicting path by appending ' (n)' before the suffix."""

    if not path.exists():
        return path

    parent = path.parent
    stem = path.stem
    suffix = path.suffix
    n = 1
    while True:
        candidate = parent / f"{stem} ({n}){suffix}"
        if not candidate.exists():
            return candidate
        n += 1


def _resolve_standard(text: str) -> StandardThread:
    """Guess the family of a designation: 'M6x1', '1/4-20', 'Tr10x2' or 'npt:1/4'."""

    token = text.strip()
    if ":" in token:
        family, designation = token.split(":", 1)
    elif token.lower().startswith("tr"):
        family, designation = "trapezoidal", token
    elif token.lower().startswith("m"):
        family, designation = "metric", token
    elif "-" in token:
        family, designation = "unified", token
    else:
        raise typer.BadParameter(f"Cannot tell the thread family of '{text}'; use family:designation.")
    try:
        return lookup_standard_thread(family, designation)
    except ThreadingError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _thread_parameters(
    thread: str | None,
    diameter: float | None,
    pitch: float | None,
    profile: str | None,
) -> tuple[tuple[tuple[float, float], ...], float, float, float]:
    """Profile, major diameter, pitch and diameter taper per unit length."""

    if thread is not None:
        standard = _resolve_standard(thread)
        points = standard.profile if profile is None else _profile_points(profile)
        major = standard.diameter if diameter is None else diameter
        return points, major, standard.pitch if pitch is None else pitch, standard.taper_per_length
    if diameter is None or pitch is None:
        raise typer.BadParameter("Give --thread, or both --diameter and --pitch.")
    return _profile_points(profile or "iso"), diameter, pitch, 0.0


def _profile_points(name: str) -> tuple[tuple[float, float], ...]:
    factory = _PROFILES.get(name.lower())
    if factory is None:
        raise typer.BadParameter(f"Unknown profile '{name}'. Choose from: {', '.join(_PROFILES)}.")
    return factory()


def _quality(facets: int | None) -> MeshQuality:
    return MeshQuality(facets=facets)


def _build(factory: Callable[[], Mesh]) -> Mesh:
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        try:
            mesh = factory()
        except (ThreadingError, BooleanOperationError) as exc:
            raise typer.BadParameter(str(exc)) from exc
    for warning in caught:
        console.print(f"[yellow]Warning: {warning.message}[/yellow]")
    return mesh


def _summary(mesh: Mesh, title: str) -> Table:
    analysis = mesh.analysis or analyze_mesh(mesh)
    units = get_unit_settings()
    xmin, xmax, ymin, ymax, zmin, zmax = mesh.bounds
    table = Table(show_header=False, box=None)
    table.add_row("Vertices", str(analysis.n_vertices))
    table.add_row("Faces", str(analysis.n_faces))
    status = "[green]yes[/green]" if analysis.is_watertight else "[red]no[/red]"
    table.add_row("Watertight", status)
    table.add_row(
        "Bounds",
        f"x {xmin:.3f}..{xmax:.3f}  y {ymin:.3f}..{ymax:.3f}  z {zmin:.3f}..{zmax:.3f} {units.label}",
    )
    for issue in analysis.issues():
        table.add_row("Issue", f"[red]{issue}[/red]")
    console.rule(title)
    return table


def _write(mesh: Mesh, output: pathlib.Path, ascii: bool, overwrite: bool, title: str) -> pathlib.Path:
    final_output = output
    if output.exists() and not overwrite:
        final_output = _next_available_path(output)
        console.print(f"[yellow]Output {output} exists; writing to {final_output} instead.[/yellow]")
    final_output.parent.mkdir(parents=True, exist_ok=True)
    write_stl(mesh, final_output, ascii=ascii)

    mode = "ASCII" if ascii else "binary"
    console.print(
        Panel(
            _summary(mesh, title),
            title=f"Wrote {mode} STL to {final_output}",
            border_style="green",
        )
    )
    return final_output


@app.command()
def rod(
    length: float = typer.Option(..., "--length", "-l", help="Nominal threaded length."),
    thread: str | None = typer.Option(None, "--thread", "-t", help="Standard designation, e.g. M10, 1/4-20, Tr12x3."),
    diameter: float | None = typer.Option(None, "--diameter", "-d", help="Major diameter."),
    pitch: float | None = typer.Option(None, "--pitch", "-p", help="Thread pitch."),
    profile: str | None = typer.Option(None, "--profile", help="Profile preset: iso, trapezoidal, acme, square, buttress."),
    starts: int = typer.Option(1, min=1, help="Number of thread starts."),
    left: bool = typer.Option(False, "--left/--right", help="Left-handed thread."),
    internal: bool = typer.Option(False, "--internal", help="Emit an internal-thread cutting mask."),
    bevel: bool = typer.Option(False, "--bevel/--no-bevel", help="Chamfer both ends."),
    higbee: bool | None = typer.Option(None, "--higbee/--no-higbee", help="Blunt-start both ends."),
    trim: bool = typer.Option(False, "--trim/--no-trim", help="Cut the rod to exactly --length."),
    facets: int | None = typer.Option(None, "--facets", min=3, help="Fixed circular facet count."),
    nozzle: float = typer.Option(0.0, "--nozzle", help="Warn when features are below this nozzle size."),
    output: pathlib.Path = typer.Option(pathlib.Path("rod.stl"), "--output", "-o", help="STL output path."),
    ascii: bool = typer.Option(False, "--ascii", help="Write ASCII STL instead of binary."),
    overwrite: bool = typer.Option(False, "--overwrite", help="Allow replacing an existing STL."),
) -> None:
    """
    Generate a threaded rod (or internal-thread mask) and save it as an STL file.
    """

    points, major, thread_pitch, taper = _thread_parameters(thread, diameter, pitch, profile)
    quality = _quality(facets)

    def factory() -> Mesh:
        mesh = generic_threaded_rod(
            points,
            thread_pitch,
            length=length,
            d1=major - taper * length,
            d2=major,
            starts=starts,
            left_handed=left,
            internal=internal,
            bevel=bevel,
            higbee=higbee,
            quality=quality,
        )
        warn_min_feature("Thread depth", float(mesh.metadata["thread_depth"]), nozzle)
        if trim:
            slab = make_cylinder(major, length, 16)
            mesh = boolean_intersection([mesh, slab])
        return mesh

    mesh = _build(factory)
    _write(mesh, output, ascii, overwrite, "Threaded rod")


@app.command()
def nut(
    width: float = typer.Option(..., "--width", "-w", help="Flat-to-flat nut width."),
    height: float = typer.Option(..., "--height", help="Nut height."),
    thread: str | None = typer.Option(None, "--thread", "-t", help="Standard designation of the mating rod."),
    diameter: float | None = typer.Option(None, "--diameter", "-d", help="Mating rod diameter."),
    pitch: float | None = typer.Option(None, "--pitch", "-p", help="Thread pitch; 0 cuts a plain bore."),
    profile: str | None = typer.Option(None, "--profile", help="Profile preset: iso, trapezoidal, acme, square, buttress."),
    shape: str = typer.Option("hex", "--shape", help="Nut shape: hex or square."),
    left: bool = typer.Option(False, "--left/--right", help="Left-handed thread."),
    inner_bevel: bool = typer.Option(False, "--inner-bevel/--no-inner-bevel", help="Chamfer the bore entries."),
    facets: int | None = typer.Option(None, "--facets", min=3, help="Fixed circular facet count."),
    output: pathlib.Path = typer.Option(pathlib.Path("nut.stl"), "--output", "-o", help="STL output path."),
    ascii: bool = typer.Option(False, "--ascii", help="Write ASCII STL instead of binary."),
    overwrite: bool = typer.Option(False, "--overwrite", help="Allow replacing an existing STL."),
) -> None:
    """
    Generate a hex or square nut and save it as an STL file.
    """

    points, major, thread_pitch, taper = _thread_parameters(thread, diameter, pitch, profile)
    quality = _quality(facets)
    mesh = _build(
        lambda: generic_threaded_nut(
            points,
            thread_pitch,
            width,
            height=height,
            d1=major - taper * height,
            d2=major,
            shape=shape,
            left_handed=left,
            inner_bevel=inner_bevel,
            quality=quality,
        )
    )
    _write(mesh, output, ascii, overwrite, "Threaded nut")


@app.command()
def helix(
    diameter: float = typer.Option(..., "--diameter", "-d", help="Base diameter the teeth stand on."),
    pitch: float = typer.Option(..., "--pitch", "-p", help="Thread pitch."),
    depth: float | None = typer.Option(None, "--depth", help="Tooth depth (default half the pitch)."),
    flank_angle: float | None = typer.Option(None, "--flank-angle", help="Flank angle in degrees (default 15)."),
    turns: float = typer.Option(2.0, "--turns", help="Number of helix turns."),
    starts: int = typer.Option(1, min=1, help="Number of thread starts."),
    left: bool = typer.Option(False, "--left/--right", help="Left-handed thread."),
    internal: bool = typer.Option(False, "--internal", help="Teeth point inward."),
    taper: float | None = typer.Option(None, "--taper", help="Degrees over which the teeth ramp in."),
    facets: int | None = typer.Option(None, "--facets", min=3, help="Fixed circular facet count."),
    output: pathlib.Path = typer.Option(pathlib.Path("helix.stl"), "--output", "-o", help="STL output path."),
    ascii: bool = typer.Option(False, "--ascii", help="Write ASCII STL instead of binary."),
    overwrite: bool = typer.Option(False, "--overwrite", help="Allow replacing an existing STL."),
) -> None:
    """
    Generate helical thread teeth and save them as an STL file.
    """

    quality = _quality(facets)
    mesh = _build(
        lambda: thread_helix(
            diameter,
            pitch,
            thread_depth=depth,
            flank_angle=flank_angle,
            turns=turns,
            starts=starts,
            left_handed=left,
            internal=internal,
            taper=taper,
            quality=quality,
        )
    )
    _write(mesh, output, ascii, overwrite, "Thread helix")
