"""
Timeline assembly: merge observation sets with score system changes and gaps.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Iterable, Optional

from packages.shared.models import (
    ChartRequest,
    GapMarker,
    ObservationSet,
    ScoreSystemChangeEvent,
    TimelineEntry,
)

logger = logging.getLogger(__name__)

NO_OBS_LIMIT = timedelta(hours=24)


def _sort_key(moment: Optional[datetime]) -> tuple[int, Optional[datetime]]:
    # Untimed items sort ahead of timed ones; sorted() is stable within each group.
    return (0, None) if moment is None else (1, moment)


def _time_order(item) -> tuple:
    moment = item.record_time if isinstance(item, ObservationSet) else item.changed_time
    return _sort_key(moment)


def build_timeline(
    observation_sets: Iterable[ObservationSet],
    score_system_changes: Iterable[ScoreSystemChangeEvent],
    gap_threshold: timedelta = NO_OBS_LIMIT,
) -> tuple[TimelineEntry, ...]:
    """Merge sorted observation sets and score system changes into one sequence.

    A gap marker is emitted wherever consecutive observation sets are more than
    ``gap_threshold`` apart. Change events are consumed in time order as the
    observation sets pass them. If the SpO2 scale moves between two sets with
    no event recording it, a synthetic untimed change is placed before the
    newer set. Events after the last set are appended.
    """
    sets = sorted(observation_sets, key=_time_order)
    events = sorted(score_system_changes, key=_time_order)

    timeline: list[TimelineEntry] = []
    last_scale: Optional[int] = None
    last_record_time: Optional[datetime] = None
    next_event = 0

    for obs_set in sets:
        if obs_set.record_time is not None:
            if last_record_time is not None and obs_set.record_time - last_record_time > gap_threshold:
                timeline.append(TimelineEntry.of(GapMarker(spo2_scale=last_scale)))
            last_record_time = obs_set.record_time

            while next_event < len(events):
                event = events[next_event]
                if event.changed_time is not None and event.changed_time > last_record_time:
                    break
                timeline.append(TimelineEntry.of(event))
                last_scale = event.spo2_scale
                next_event += 1

        if last_scale is not None and obs_set.spo2_scale is not None and obs_set.spo2_scale != last_scale:
            logger.debug(
                f"SpO2 scale changed {last_scale} -> {obs_set.spo2_scale} without a recorded change"
            )
            timeline.append(
                TimelineEntry.of(
                    ScoreSystemChangeEvent(
                        changed_time=None,
                        score_system=obs_set.score_system,
                        spo2_scale=obs_set.spo2_scale,
                    )
                )
            )
        last_scale = obs_set.spo2_scale
        timeline.append(TimelineEntry.of(obs_set))

    timeline.extend(TimelineEntry.of(event) for event in events[next_event:])
    return tuple(timeline)


def timeline_for_request(request: ChartRequest) -> tuple[TimelineEntry, ...]:
    send_config = request.send_config
    observation_sets = [ObservationSet.from_json(o, send_config) for o in request.observation_sets]
    changes = [ScoreSystemChangeEvent.from_json(c) for c in request.encounter.score_system_history]
    return build_timeline(observation_sets, changes)
