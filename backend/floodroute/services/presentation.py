"""Presentation payloads for a map client: route layers, status and popups."""

import logging

from floodroute.exceptions import RenderError
from floodroute.schemas.route import (
    CandidateSummary,
    MapLayer,
    RouteCandidate,
    RouteData,
    RouteStep,
    RouteView,
    geometry_to_geojson,
)
from floodroute.schemas.weather import WeatherConditions
from floodroute.services.sampler import midpoint
from floodroute.services.selector import SelectionOutcome, SelectionState

logger = logging.getLogger(__name__)

ALT_PAINT = {"line-color": "#888", "line-width": 3, "line-opacity": 0.5}
BEST_PAINT = {"line-color": "#007cbf", "line-width": 6, "line-opacity": 0.95}


def summary_text(route: RouteData) -> str:
    """Distance in km (2 decimals) and duration in whole minutes."""
    return f"{route.distance / 1000:.2f} km, {round(route.duration / 60)} min"


def describe_step(step: RouteStep) -> str:
    """Human readable text for one turn-by-turn step."""
    text = step.maneuver_type.replace("_", " ").strip().capitalize() or "Continue"
    if step.modifier:
        text += f" {step.modifier}"
    if step.name:
        text += f" onto {step.name}"
    return f"{text} ({step.distance:.0f} m)"


def directions(route: RouteData) -> list[str]:
    """One entry per routing step."""
    return [describe_step(step) for step in route.steps]


def route_layer(candidate: RouteCandidate, suffix: str, is_best: bool = False) -> MapLayer:
    """Line layer definition for one route."""
    if not candidate.route.geometry:
        raise RenderError(f"Route {candidate.index} has no geometry to draw")
    return MapLayer(
        id=f"route-line-{suffix}",
        source=f"route-src-{suffix}",
        paint=dict(BEST_PAINT if is_best else ALT_PAINT),
        data={
            "type": "Feature",
            "properties": {"index": candidate.index, "risk": round(candidate.score, 4)},
            "geometry": geometry_to_geojson(candidate.route.geometry),
        },
    )


def route_layers(candidates: list[RouteCandidate]) -> list[MapLayer]:
    """All alternatives dimmed, then the best one highlighted on top.

    Candidates must already be sorted with the best first.
    """
    layers = []
    for i, candidate in enumerate(candidates):
        try:
            layers.append(route_layer(candidate, f"alt-{i}"))
        except RenderError as e:
            logger.warning(f"Skipping route layer: {e}")
    if candidates:
        try:
            layers.append(route_layer(candidates[0], "best", is_best=True))
        except RenderError as e:
            logger.warning(f"Skipping best route layer: {e}")
    return layers


def status_for(outcome: SelectionOutcome) -> str:
    """Status line for a finished request."""
    best = outcome.best
    if outcome.state != SelectionState.SELECTED or best is None:
        return outcome.message
    if outcome.above_threshold:
        return (
            f"Warning: best route risk {best.score:.2f} >= threshold "
            f"{outcome.threshold:g}. Consider detour."
        )
    return f"Best route selected (risk {best.score:.2f})."


def risk_popup(candidate: RouteCandidate) -> str:
    """Breakdown shown at the midpoint of the selected route."""
    b = candidate.breakdown
    return (
        f"Route risk: {b.combined:.2f}\n"
        f"learned avg: {b.learned:.2f}\n"
        f"NOAH overlap: {b.hazard * 100:.1f}%\n"
        f"weather sample rainScore: {b.rain:g} mm, alertScore: {b.alert:g}"
    )


def weather_popup(conditions: WeatherConditions | None) -> str | None:
    """Text shown next to a flood report when weather is available."""
    if conditions is None:
        return None
    text = conditions.text or "N/A"
    return (
        f"Weather\n{text}\n"
        f"Precip (past hour): {conditions.precipitation_past_hour:g} {conditions.unit}".rstrip()
    )


def hazard_layer_style(source: str = "noahHazard") -> list[dict]:
    """Fill, outline and label layers for the hazard overlay."""
    return [
        {
            "id": f"{source}-fill",
            "type": "fill",
            "source": source,
            "paint": {
                "fill-color": [
                    "interpolate",
                    ["linear"],
                    ["coalesce", ["get", "risk"], 0],
                    0, "#ffffb2",
                    1, "#fecc5c",
                    2, "#fd8d3c",
                    3, "#f03b20",
                ],
                "fill-opacity": 0.35,
            },
        },
        {
            "id": f"{source}-line",
            "type": "line",
            "source": source,
            "paint": {"line-color": "#990000", "line-width": 1},
        },
        {
            "id": f"{source}-labels",
            "type": "symbol",
            "source": source,
            "layout": {
                "text-field": [
                    "coalesce",
                    ["get", "label"],
                    ["concat", ["to-string", ["coalesce", ["get", "risk"], 0]], " risk"],
                ],
                "text-size": 12,
                "text-allow-overlap": False,
            },
            "paint": {"text-color": "#600000"},
        },
    ]


def render(outcome: SelectionOutcome, generation: int) -> RouteView:
    """Build the full view for a finished request."""
    view = RouteView(
        state=outcome.state.value,
        status=status_for(outcome),
        generation=generation,
        threshold=outcome.threshold,
        above_threshold=outcome.above_threshold,
    )
    best = outcome.best
    if best is None:
        return view

    view.summary = summary_text(best.route)
    view.directions = directions(best.route)
    view.popup = risk_popup(best)
    view.popup_at = midpoint(best.route.geometry)
    view.candidates = [
        CandidateSummary(
            index=c.index,
            score=c.score,
            summary=summary_text(c.route),
            breakdown=c.breakdown,
        )
        for c in outcome.candidates
    ]
    view.layers = route_layers(outcome.candidates)
    return view
