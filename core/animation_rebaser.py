#!/usr/bin/env python3
"""
Animation Rebaser Module
Re-expresses animation curves in the converted coordinate system.

The curves of an imported clip still describe local transforms in the source
convention. Each keyframe value, and its in/out tangents, must go through the
same conversion the static transform of the node went through, so that sampling
a rebased curve yields the pose the spatial conversion would produce.

Curves are processed per property group (rotation x/y/z/w, position x/y/z,
scale x/y/z). A group whose curves are missing or disagree on keyframe count is
left unmodified and reported.
"""

import math
from typing import Dict, List, Optional, Sequence

from . import rotations
from .float_snap import snap_vector
from .import_log import ImportLog
from .import_options import ImportOptions
from .scene_data import (AnimationClip, AnimationCurve, Depth, Keyframe, POSITION_CHANNELS,
                         ROTATION_CHANNELS, SCALE_CHANNELS)

SIN_45 = math.sin(math.pi / 4.0)


class CurveSetError(Exception):
    """A property group cannot be rebased as a whole"""

    def __init__(self, path: str, group: str, message: str):
        self.path = path
        self.group = group
        super().__init__(f"animated object [{path}] {message}")


def fetch_curve_set(clip: AnimationClip, path: str, group: str,
                    channels: Sequence[str]) -> List[AnimationCurve]:
    """Fetch the curves of a property group, all with the same keyframe count

    Args:
        clip: Clip holding the curves
        path: Binding path of the animated object
        group: Group name used in messages ("rotation", "position", "scale")
        channels: Property names of the group, e.g. ROTATION_CHANNELS

    Returns:
        list: One AnimationCurve per channel, in channel order

    Raises:
        CurveSetError: If a curve is missing or the keyframe counts differ
    """
    curves = [clip.get_curve(path, channel) for channel in channels]
    if any(curve is None for curve in curves):
        raise CurveSetError(path, group, f"doesn't have correct {group} curves")

    counts = [len(curve) for curve in curves]
    if len(set(counts)) > 1:
        axes = [channel.rsplit('.', 1)[-1] for channel in channels]
        detail = " ".join(f"{axis}: {count}" for axis, count in zip(axes, counts))
        raise CurveSetError(
            path, group,
            f"doesn't have the same keyframes for {''.join(axes).upper()} {group} curves. {detail}"
        )
    return curves


def _swap_tangents_negated(target: Keyframe, source: Keyframe):
    """target <- -source, source <- old target (in and out tangents)"""
    in_t, out_t = target.in_tangent, target.out_tangent
    target.in_tangent, target.out_tangent = -source.in_tangent, -source.out_tangent
    source.in_tangent, source.out_tangent = in_t, out_t


def rebase_rotation_key(kx: Keyframe, ky: Keyframe, kz: Keyframe, kw: Keyframe,
                        depth: Depth, turn_around: bool = False):
    """Convert one rotation keyframe (four channels) in place"""
    if depth is Depth.FIRST_LEVEL:
        # q * AngleAxis(90, right), which is linear in the components, so the
        # tangents go through the very same combination
        for attr in ('value', 'in_tangent', 'out_tangent'):
            x, y, z, w = (getattr(k, attr) for k in (kx, ky, kz, kw))
            setattr(kx, attr, (w + x) * SIN_45)
            setattr(ky, attr, (y + z) * SIN_45)
            setattr(kz, attr, (z - y) * SIN_45)
            setattr(kw, attr, (w - x) * SIN_45)
    else:
        x, y, z, w = kx.value, ky.value, kz.value, kw.value
        kx.value, ky.value, kz.value, kw.value = -x, -z, y, -w

        kx.invert_tangents()
        kw.invert_tangents()
        _swap_tangents_negated(ky, kz)

    if turn_around:
        kx.value = -kx.value
        kz.value = -kz.value
        kx.invert_tangents()
        kz.invert_tangents()


def rebase_position_key(kx: Keyframe, ky: Keyframe, kz: Keyframe, depth: Depth,
                        turn_around: bool = False, snap_threshold: Optional[float] = None):
    """Convert one position keyframe (three channels) in place"""
    pos = (kx.value, ky.value, kz.value)

    if depth is Depth.FIRST_LEVEL:
        if turn_around:
            pos = rotations.rotate_vectors(rotations.turn_around(), pos)
            kx.invert_tangents()
            kz.invert_tangents()
    else:
        pos = rotations.rotate_vectors(rotations.compound_rotation(turn_around), pos)
        # Rotating X-90 maps y -> -z and z -> y for the slopes as well
        _swap_tangents_negated(kz, ky)
        if turn_around:
            kx.invert_tangents()
            kz.invert_tangents()

    if snap_threshold is not None:
        pos = snap_vector(pos, snap_threshold)

    kx.value, ky.value, kz.value = (float(v) for v in pos)


class AnimationCurveRebaser:
    """Rebases the curves of animation clips using recorded node depths"""

    def __init__(self, options: ImportOptions, depths: Dict[str, Depth],
                 log: Optional[ImportLog] = None):
        """Initialize rebaser

        Args:
            options: Conversion options (turn around, float fix)
            depths: Binding path -> Depth, as recorded by HierarchyWalker.walk()
            log: Report buffer
        """
        self.options = options
        self.depths = depths
        self.log = log

    def _info(self, message):
        if self.log:
            self.log.info(message)

    def _warning(self, message):
        if self.log:
            self.log.warning(message)

    def process_clips(self, clips: Sequence[AnimationClip]):
        if not clips:
            return

        self._info(f"{len(clips)} animation clips found")
        for clip in clips:
            self.process_clip(clip)

    def process_clip(self, clip: AnimationClip):
        paths = clip.animated_paths()
        self._info(f'Animation clip "{clip.name}" references {len(paths)} objects')

        for path in paths:
            depth = self.depths.get(path)
            if depth is None:
                # Unconverted root (case B) or a path outside the hierarchy
                self._info(f"Animated object [{path}] was not converted, curves left as they are")
                continue

            self.process_rotation(clip, path, depth)
            self.process_position(clip, path, depth)
            self.process_scale(clip, path)

    def _fetch(self, clip, path, group, channels) -> Optional[List[AnimationCurve]]:
        try:
            return fetch_curve_set(clip, path, group, channels)
        except CurveSetError as e:
            self._warning(str(e))
            return None

    def process_rotation(self, clip: AnimationClip, path: str, depth: Depth):
        curves = self._fetch(clip, path, "rotation", ROTATION_CHANNELS)
        if not curves:
            return

        cx, cy, cz, cw = curves
        for kx, ky, kz, kw in zip(cx.keys, cy.keys, cz.keys, cw.keys):
            rebase_rotation_key(kx, ky, kz, kw, depth, self.options.turn_around)

    def process_position(self, clip: AnimationClip, path: str, depth: Depth):
        curves = self._fetch(clip, path, "position", POSITION_CHANNELS)
        if not curves:
            return

        threshold = self.options.float_threshold if self.options.fix_floats else None
        cx, cy, cz = curves
        for kx, ky, kz in zip(cx.keys, cy.keys, cz.keys):
            rebase_position_key(kx, ky, kz, depth, self.options.turn_around, threshold)

    def process_scale(self, clip: AnimationClip, path: str):
        curves = self._fetch(clip, path, "scale", SCALE_CHANNELS)
        if not curves or not len(curves[0]):
            return

        _, cy, cz = curves
        clip.set_curve(path, SCALE_CHANNELS[1], cz)
        clip.set_curve(path, SCALE_CHANNELS[2], cy)
