# Copyright (c) 2026 Huewise
# SPDX-License-Identifier: MIT

"""
Color space conversions.

Conversion hub: every space converts to and from CIE XYZ (D65, Y in [0, 1]).

    sRGB ⇄ linear RGB ⇄ XYZ ⇄ {Lab ⇄ LCh, OKLab ⇄ OKLCh, Luv, JzAzBz}
    HSL ⇄ sRGB

References:
- sRGB transfer curve: IEC 61966-2-1
- CIELAB: CIE 15:2004
- OKLab: https://bottosson.github.io/posts/oklab/
- JzAzBz: Safdar et al. (2017)
- Display P3 / Rec.2020 matrices: CSS Color 4

All functions are pure NumPy and operate on arrays of shape (..., 3)
in the channel order of their space.
"""

from __future__ import annotations

import re
from typing import Optional, Sequence, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray

from huewise.errors import InvalidColorSpace
from huewise.schema.types import ChannelRange, ColorSpace, GamutPreset


SpaceLike = Union[ColorSpace, str]
GamutLike = Union[GamutPreset, str]

_HEX_RE = re.compile(r"#?([0-9a-fA-F]{6})")


# =============================================================================
# sRGB ↔ Linear RGB
# =============================================================================


def srgb_to_linear(srgb: ArrayLike) -> NDArray[np.float64]:
    """
    Convert gamma-encoded sRGB values to linear RGB.

    sRGB uses a piecewise curve:
    - For values <= 0.04045: value / 12.92
    - For values > 0.04045: ((value + 0.055) / 1.055) ^ 2.4
    """
    srgb = np.asarray(srgb, dtype=np.float64)
    # Power branch only sees values above the threshold
    safe = np.maximum(srgb, 0.04045)
    return np.where(
        srgb <= 0.04045,
        srgb / 12.92,
        np.power((safe + 0.055) / 1.055, 2.4),
    )


def linear_to_srgb(linear: ArrayLike) -> NDArray[np.float64]:
    """
    Convert linear RGB to gamma-encoded sRGB.

    Inverse of srgb_to_linear. Values are not clipped, so out-of-gamut
    colors survive a round trip.
    """
    linear = np.asarray(linear, dtype=np.float64)
    safe = np.maximum(linear, 0.0031308)
    return np.where(
        linear <= 0.0031308,
        linear * 12.92,
        1.055 * np.power(safe, 1.0 / 2.4) - 0.055,
    )


# =============================================================================
# Hex codec
# =============================================================================


def hex_to_rgb(hex_color: str) -> NDArray[np.float64]:
    """
    Parse a hex color string into sRGB [0, 1].

    Args:
        hex_color: String like "#3941C8" or "3941C8"

    Returns:
        Array of shape (3,)

    Raises:
        ValueError: If no 6-digit hex triplet is present
    """
    m = _HEX_RE.search(str(hex_color))
    if not m:
        raise ValueError(f"Invalid hex color: {hex_color!r}")
    digits = m.group(1)
    return np.array(
        [int(digits[i:i + 2], 16) / 255.0 for i in (0, 2, 4)],
        dtype=np.float64,
    )


def hexes_to_rgb(hex_colors: Sequence[str]) -> NDArray[np.float64]:
    """Parse many hex strings into an (N, 3) sRGB array."""
    if len(hex_colors) == 0:
        return np.empty((0, 3), dtype=np.float64)
    return np.stack([hex_to_rgb(h) for h in hex_colors])


def rgb_to_hex(rgb: ArrayLike) -> str:
    """
    Format an sRGB triple [0, 1] as "#RRGGBB".

    Channels are clipped to [0, 1] and rounded half-up to 8 bits.
    """
    rgb = np.clip(np.nan_to_num(np.asarray(rgb, dtype=np.float64)), 0.0, 1.0)
    r, g, b = np.floor(rgb * 255.0 + 0.5).astype(int)
    return f"#{r:02X}{g:02X}{b:02X}"


def rgbs_to_hex(rgb: ArrayLike) -> list[str]:
    """Format an (N, 3) sRGB array as hex strings."""
    rgb = np.asarray(rgb, dtype=np.float64).reshape(-1, 3)
    return [rgb_to_hex(row) for row in rgb]


# =============================================================================
# sRGB ↔ HSL
# =============================================================================


def rgb_to_hsl(rgb: ArrayLike) -> NDArray[np.float64]:
    """
    Convert sRGB [0, 1] to HSL.

    Returns:
        Array of shape (..., 3) with (H in degrees [0, 360), S, L in [0, 100])
    """
    rgb = np.asarray(rgb, dtype=np.float64)
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]

    mx = np.max(rgb, axis=-1)
    mn = np.min(rgb, axis=-1)
    l = (mx + mn) / 2.0
    d = mx - mn
    gray = d == 0

    denom = 1.0 - np.abs(2.0 * l - 1.0)
    s = np.where(gray | (denom <= 0), 0.0, d / np.where(denom <= 0, 1.0, denom))

    safe_d = np.where(gray, 1.0, d)
    h = np.select(
        [gray, mx == r, mx == g],
        [0.0, np.mod((g - b) / safe_d, 6.0), (b - r) / safe_d + 2.0],
        (r - g) / safe_d + 4.0,
    )
    return np.stack([np.mod(h * 60.0, 360.0), s * 100.0, l * 100.0], axis=-1)


def hsl_to_rgb(hsl: ArrayLike) -> NDArray[np.float64]:
    """
    Convert HSL (H degrees, S/L in [0, 100]) to sRGB [0, 1].

    Hue is periodic: h and h + 360 produce the same color.
    """
    hsl = np.asarray(hsl, dtype=np.float64)
    h = np.mod(hsl[..., 0], 360.0)
    s = hsl[..., 1] / 100.0
    l = hsl[..., 2] / 100.0
    a = s * np.minimum(l, 1.0 - l)

    def f(n: float) -> NDArray[np.float64]:
        k = np.mod(n + h / 30.0, 12.0)
        return l - a * np.maximum(-1.0, np.minimum(np.minimum(k - 3.0, 9.0 - k), 1.0))

    return np.stack([f(0.0), f(8.0), f(4.0)], axis=-1)


# =============================================================================
# Linear RGB ↔ XYZ (D65) per gamut
# =============================================================================

# sRGB / Rec.709 primaries
_SRGB_TO_XYZ = np.array([
    [0.4124564, 0.3575761, 0.1804375],
    [0.2126729, 0.7151522, 0.0721750],
    [0.0193339, 0.1191920, 0.9503041],
], dtype=np.float64)

_XYZ_TO_SRGB = np.array([
    [3.2404542, -1.5371385, -0.4985314],
    [-0.9692660, 1.8760108, 0.0415560],
    [0.0556434, -0.2040259, 1.0572252],
], dtype=np.float64)

# CSS Color 4 Display P3
_P3_TO_XYZ = np.array([
    [0.4865709486482162, 0.26566769316909306, 0.1982172852343625],
    [0.2289745640697488, 0.6917385218365064, 0.079286914093745],
    [0.0, 0.04511338185890264, 1.043944368900976],
], dtype=np.float64)

_XYZ_TO_P3 = np.array([
    [2.493496911941425, -0.9313836179191239, -0.402710784450717],
    [-0.8294889695615749, 1.7626640603183463, 0.02362468584194358],
    [0.03584583024378447, -0.07617238926804182, 0.9568845240076872],
], dtype=np.float64)

# ITU-R BT.2020
_REC2020_TO_XYZ = np.array([
    [0.6369580483012914, 0.14461690358620832, 0.1688809751641721],
    [0.2627002120112671, 0.6779980715188708, 0.05930171646986196],
    [0.0, 0.028072693049087428, 1.060985057710791],
], dtype=np.float64)

_XYZ_TO_REC2020 = np.array([
    [1.7166511879712674, -0.35567078377639233, -0.25336628137365974],
    [-0.6666843518324892, 1.6164812366349395, 0.01576854581391113],
    [0.017639857445310783, -0.042770613257808524, 0.9421031212354738],
], dtype=np.float64)

GAMUT_MATRICES: dict[GamutPreset, tuple[NDArray[np.float64], NDArray[np.float64]]] = {
    GamutPreset.SRGB: (_SRGB_TO_XYZ, _XYZ_TO_SRGB),
    GamutPreset.DISPLAY_P3: (_P3_TO_XYZ, _XYZ_TO_P3),
    GamutPreset.REC2020: (_REC2020_TO_XYZ, _XYZ_TO_REC2020),
}

D65_WHITE = np.array([0.95047, 1.0, 1.08883], dtype=np.float64)


def _apply(matrix: NDArray[np.float64], values: ArrayLike) -> NDArray[np.float64]:
    values = np.asarray(values, dtype=np.float64)
    return np.einsum("...j,ij->...i", values, matrix)


def gamut_to_xyz(rgb: ArrayLike, gamut: GamutLike = GamutPreset.SRGB) -> NDArray[np.float64]:
    """Linear RGB in the given gamut's primaries to XYZ."""
    return _apply(GAMUT_MATRICES[GamutPreset.parse(gamut)][0], rgb)


def xyz_to_gamut(xyz: ArrayLike, gamut: GamutLike = GamutPreset.SRGB) -> NDArray[np.float64]:
    """XYZ to linear RGB in the given gamut's primaries (unclipped)."""
    return _apply(GAMUT_MATRICES[GamutPreset.parse(gamut)][1], xyz)


def convert_linear_rgb(
    rgb: ArrayLike,
    source: GamutLike,
    target: GamutLike,
) -> NDArray[np.float64]:
    """Re-express linear RGB from one gamut's primaries in another's."""
    return xyz_to_gamut(gamut_to_xyz(rgb, source), target)


def linear_rgb_to_xyz(rgb: ArrayLike) -> NDArray[np.float64]:
    """Linear sRGB to XYZ."""
    return _apply(_SRGB_TO_XYZ, rgb)


def xyz_to_linear_rgb(xyz: ArrayLike) -> NDArray[np.float64]:
    """XYZ to linear sRGB (unclipped)."""
    return _apply(_XYZ_TO_SRGB, xyz)


def srgb_to_xyz(srgb: ArrayLike) -> NDArray[np.float64]:
    """Gamma-encoded sRGB to XYZ."""
    return linear_rgb_to_xyz(srgb_to_linear(srgb))


def xyz_to_srgb(xyz: ArrayLike) -> NDArray[np.float64]:
    """XYZ to gamma-encoded sRGB (unclipped)."""
    return linear_to_srgb(xyz_to_linear_rgb(xyz))


# =============================================================================
# XYZ ↔ CIELAB ↔ LCh
# =============================================================================

_DELTA = 6.0 / 29.0


def _lab_f(t: NDArray[np.float64]) -> NDArray[np.float64]:
    return np.where(
        t > _DELTA ** 3,
        np.cbrt(t),
        t / (3.0 * _DELTA * _DELTA) + 4.0 / 29.0,
    )


def _lab_f_inv(t: NDArray[np.float64]) -> NDArray[np.float64]:
    return np.where(
        t > _DELTA,
        t * t * t,
        3.0 * _DELTA * _DELTA * (t - 4.0 / 29.0),
    )


def xyz_to_lab(xyz: ArrayLike) -> NDArray[np.float64]:
    """
    Convert XYZ to CIELAB (D65).

    Returns:
        Array of shape (..., 3) with (L in [0, 100], a, b)
    """
    xyz = np.asarray(xyz, dtype=np.float64)
    f = _lab_f(xyz / D65_WHITE)
    fx, fy, fz = f[..., 0], f[..., 1], f[..., 2]
    return np.stack([116.0 * fy - 16.0, 500.0 * (fx - fy), 200.0 * (fy - fz)], axis=-1)


def lab_to_xyz(lab: ArrayLike) -> NDArray[np.float64]:
    """Convert CIELAB (D65) to XYZ."""
    lab = np.asarray(lab, dtype=np.float64)
    fy = (lab[..., 0] + 16.0) / 116.0
    fx = fy + lab[..., 1] / 500.0
    fz = fy - lab[..., 2] / 200.0
    return _lab_f_inv(np.stack([fx, fy, fz], axis=-1)) * D65_WHITE


def _rect_to_polar(lab: ArrayLike) -> NDArray[np.float64]:
    lab = np.asarray(lab, dtype=np.float64)
    a = lab[..., 1]
    b = lab[..., 2]
    c = np.hypot(a, b)
    h = np.mod(np.degrees(np.arctan2(b, a)), 360.0)
    return np.stack([lab[..., 0], c, h], axis=-1)


def _polar_to_rect(lch: ArrayLike) -> NDArray[np.float64]:
    lch = np.asarray(lch, dtype=np.float64)
    h = np.radians(np.mod(lch[..., 2], 360.0))
    c = lch[..., 1]
    return np.stack([lch[..., 0], c * np.cos(h), c * np.sin(h)], axis=-1)


def lab_to_lch(lab: ArrayLike) -> NDArray[np.float64]:
    """CIELAB to LCh (H in degrees [0, 360))."""
    return _rect_to_polar(lab)


def lch_to_lab(lch: ArrayLike) -> NDArray[np.float64]:
    """LCh to CIELAB."""
    return _polar_to_rect(lch)


# =============================================================================
# XYZ ↔ OKLab ↔ OKLCh
# =============================================================================

# XYZ to LMS (cone responses)
_OK_M1 = np.array([
    [0.8189330101, 0.3618667424, -0.1288597137],
    [0.0329845436, 0.9293118715, 0.0361456387],
    [0.0482003018, 0.2643662691, 0.6338517070],
], dtype=np.float64)

# LMS to OKLab
_OK_M2 = np.array([
    [0.2104542553, 0.7936177850, -0.0040720468],
    [1.9779984951, -2.4285922050, 0.4505937099],
    [0.0259040371, 0.7827717662, -0.8086757660],
], dtype=np.float64)

_OK_M1_INV = np.linalg.inv(_OK_M1)
_OK_M2_INV = np.linalg.inv(_OK_M2)


def xyz_to_oklab(xyz: ArrayLike) -> NDArray[np.float64]:
    """
    Convert XYZ to OKLab.

    Returns:
        Array of shape (..., 3) with (L in [0, 1], a, b)
    """
    lms = _apply(_OK_M1, xyz)
    # Signed cube root keeps out-of-gamut colors finite
    return _apply(_OK_M2, np.cbrt(lms))


def oklab_to_xyz(lab: ArrayLike) -> NDArray[np.float64]:
    """Convert OKLab to XYZ."""
    lms_cbrt = _apply(_OK_M2_INV, lab)
    return _apply(_OK_M1_INV, lms_cbrt ** 3)


def oklab_to_oklch(lab: ArrayLike) -> NDArray[np.float64]:
    """OKLab to OKLCh (H in degrees [0, 360))."""
    return _rect_to_polar(lab)


def oklch_to_oklab(lch: ArrayLike) -> NDArray[np.float64]:
    """OKLCh to OKLab."""
    return _polar_to_rect(lch)


def srgb_to_oklab(srgb: ArrayLike) -> NDArray[np.float64]:
    """Gamma-encoded sRGB to OKLab through the XYZ bridge."""
    return xyz_to_oklab(srgb_to_xyz(srgb))


def oklab_to_srgb(lab: ArrayLike) -> NDArray[np.float64]:
    """OKLab to gamma-encoded sRGB through the XYZ bridge (unclipped)."""
    return xyz_to_srgb(oklab_to_xyz(lab))


# =============================================================================
# XYZ ↔ CIELUV
# =============================================================================

_UV_DENOM_N = D65_WHITE[0] + 15.0 * D65_WHITE[1] + 3.0 * D65_WHITE[2]
_U_PRIME_N = 4.0 * D65_WHITE[0] / _UV_DENOM_N
_V_PRIME_N = 9.0 * D65_WHITE[1] / _UV_DENOM_N


def xyz_to_luv(xyz: ArrayLike) -> NDArray[np.float64]:
    """Convert XYZ to CIE L*u*v* (D65)."""
    xyz = np.asarray(xyz, dtype=np.float64)
    x, y, z = xyz[..., 0], xyz[..., 1], xyz[..., 2]
    denom = x + 15.0 * y + 3.0 * z
    ok = denom > 1e-12
    safe = np.where(ok, denom, 1.0)
    u_prime = np.where(ok, 4.0 * x / safe, 0.0)
    v_prime = np.where(ok, 9.0 * y / safe, 0.0)
    l = 116.0 * _lab_f(y / D65_WHITE[1]) - 16.0
    dark = l <= 1e-9
    u = np.where(dark, 0.0, 13.0 * l * (u_prime - _U_PRIME_N))
    v = np.where(dark, 0.0, 13.0 * l * (v_prime - _V_PRIME_N))
    return np.stack([np.where(dark, 0.0, l), u, v], axis=-1)


def luv_to_xyz(luv: ArrayLike) -> NDArray[np.float64]:
    """Convert CIE L*u*v* (D65) to XYZ."""
    luv = np.asarray(luv, dtype=np.float64)
    l, u, v = luv[..., 0], luv[..., 1], luv[..., 2]
    dark = ~np.isfinite(l) | (l <= 1e-9)
    safe_l = np.where(dark, 1.0, l)
    u_prime = u / (13.0 * safe_l) + _U_PRIME_N
    v_prime = v / (13.0 * safe_l) + _V_PRIME_N
    y = _lab_f_inv((safe_l + 16.0) / 116.0) * D65_WHITE[1]
    flat = np.abs(v_prime) <= 1e-12
    safe_v = np.where(flat, 1.0, v_prime)
    x = np.where(flat, 0.0, y * 9.0 * u_prime / (4.0 * safe_v))
    z = np.where(flat, 0.0, y * (12.0 - 3.0 * u_prime - 20.0 * v_prime) / (4.0 * safe_v))
    out = np.stack([x, y, z], axis=-1)
    return np.where(dark[..., None], 0.0, out)


# =============================================================================
# XYZ ↔ JzAzBz
# =============================================================================

# Relative XYZ is mapped onto an absolute HDR reference luminance
_JZ_REFERENCE = 10000.0
_JZ_B = 1.15
_JZ_G = 0.66
_JZ_C1 = 3424.0 / 4096.0
_JZ_C2 = 2413.0 / 128.0
_JZ_C3 = 2392.0 / 128.0
_JZ_N = 2610.0 / 16384.0
_JZ_P = 1.7 * 2523.0 / 32.0
_JZ_D = -0.56
_JZ_D0 = 1.6295499532821566e-11

_JZ_M1 = np.array([
    [0.41478972, 0.579999, 0.0146480],
    [-0.2015100, 1.120649, 0.0531008],
    [-0.0166008, 0.264800, 0.6684799],
], dtype=np.float64)

_JZ_M2 = np.array([
    [0.5, 0.5, 0.0],
    [3.524000, -4.066708, 0.542708],
    [0.199076, 1.096799, -1.295875],
], dtype=np.float64)

_JZ_M1_INV = np.linalg.inv(_JZ_M1)
_JZ_M2_INV = np.linalg.inv(_JZ_M2)


def _jz_pq(t: NDArray[np.float64]) -> NDArray[np.float64]:
    p = np.power(np.maximum(t, 0.0) / _JZ_REFERENCE, _JZ_N)
    return np.power((_JZ_C1 + _JZ_C2 * p) / (1.0 + _JZ_C3 * p), _JZ_P)


def _jz_pq_inv(tp: NDArray[np.float64]) -> NDArray[np.float64]:
    y = np.power(np.maximum(tp, 0.0), 1.0 / _JZ_P)
    den = y * _JZ_C3 - _JZ_C2
    safe = np.where(np.abs(den) <= 1e-18, -1.0, den)
    x = np.where(np.abs(den) <= 1e-18, 0.0, (_JZ_C1 - y) / safe)
    return _JZ_REFERENCE * np.power(np.maximum(x, 0.0), 1.0 / _JZ_N)


def _xyz_to_jzazbz_raw(xyz: ArrayLike) -> NDArray[np.float64]:
    xyz = np.asarray(xyz, dtype=np.float64)
    x, y, z = xyz[..., 0], xyz[..., 1], xyz[..., 2]
    xp = _JZ_B * x - (_JZ_B - 1.0) * z
    yp = _JZ_G * y - (_JZ_G - 1.0) * x
    lms = _apply(_JZ_M1, np.stack([xp, yp, z], axis=-1))
    iab = _apply(_JZ_M2, _jz_pq(lms))
    iz = iab[..., 0]
    jz = (1.0 + _JZ_D) * iz / (1.0 + _JZ_D * iz) - _JZ_D0
    return np.stack([jz, iab[..., 1], iab[..., 2]], axis=-1)


_JZ_WHITE = max(float(_xyz_to_jzazbz_raw(D65_WHITE)[0]), 1e-9)


def xyz_to_jzazbz(xyz: ArrayLike) -> NDArray[np.float64]:
    """
    Convert XYZ to JzAzBz.

    Jz is normalized by the Jz of the D65 white so that it spans ~[0, 1].
    """
    jab = _xyz_to_jzazbz_raw(xyz)
    return np.stack([jab[..., 0] / _JZ_WHITE, jab[..., 1], jab[..., 2]], axis=-1)


def jzazbz_to_xyz(jab: ArrayLike) -> NDArray[np.float64]:
    """Convert (white-normalized) JzAzBz to XYZ."""
    jab = np.nan_to_num(np.asarray(jab, dtype=np.float64))
    jzp = jab[..., 0] * _JZ_WHITE + _JZ_D0
    den = (1.0 + _JZ_D) - _JZ_D * jzp
    iz = np.where(np.abs(den) <= 1e-18, 0.0, jzp / np.where(den == 0, 1.0, den))
    lms_p = _apply(_JZ_M2_INV, np.stack([iz, jab[..., 1], jab[..., 2]], axis=-1))
    xyz_p = _apply(_JZ_M1_INV, _jz_pq_inv(lms_p))
    z = xyz_p[..., 2]
    x = (xyz_p[..., 0] + (_JZ_B - 1.0) * z) / _JZ_B
    y = (xyz_p[..., 1] + (_JZ_G - 1.0) * x) / _JZ_G
    return np.stack([x, y, z], axis=-1)


# =============================================================================
# Dispatch through XYZ
# =============================================================================


def _hsl_to_xyz(values: ArrayLike) -> NDArray[np.float64]:
    return srgb_to_xyz(hsl_to_rgb(values))


def _xyz_to_hsl(xyz: ArrayLike) -> NDArray[np.float64]:
    return rgb_to_hsl(xyz_to_srgb(xyz))


def _identity(values: ArrayLike) -> NDArray[np.float64]:
    return np.array(values, dtype=np.float64)


_TO_XYZ = {
    ColorSpace.XYZ: _identity,
    ColorSpace.RGB: linear_rgb_to_xyz,
    ColorSpace.SRGB: srgb_to_xyz,
    ColorSpace.HSL: _hsl_to_xyz,
    ColorSpace.LAB: lab_to_xyz,
    ColorSpace.LCH: lambda v: lab_to_xyz(lch_to_lab(v)),
    ColorSpace.OKLAB: oklab_to_xyz,
    ColorSpace.OKLCH: lambda v: oklab_to_xyz(oklch_to_oklab(v)),
    ColorSpace.LUV: luv_to_xyz,
    ColorSpace.JZAZBZ: jzazbz_to_xyz,
}

_FROM_XYZ = {
    ColorSpace.XYZ: _identity,
    ColorSpace.RGB: xyz_to_linear_rgb,
    ColorSpace.SRGB: xyz_to_srgb,
    ColorSpace.HSL: _xyz_to_hsl,
    ColorSpace.LAB: xyz_to_lab,
    ColorSpace.LCH: lambda x: lab_to_lch(xyz_to_lab(x)),
    ColorSpace.OKLAB: xyz_to_oklab,
    ColorSpace.OKLCH: lambda x: oklab_to_oklch(xyz_to_oklab(x)),
    ColorSpace.LUV: xyz_to_luv,
    ColorSpace.JZAZBZ: xyz_to_jzazbz,
}


def to_xyz(values: ArrayLike, space: SpaceLike) -> NDArray[np.float64]:
    """Convert values in ``space`` to XYZ."""
    return _TO_XYZ[ColorSpace.parse(space)](values)


def from_xyz(xyz: ArrayLike, space: SpaceLike) -> NDArray[np.float64]:
    """Convert XYZ to values in ``space``."""
    return _FROM_XYZ[ColorSpace.parse(space)](xyz)


def convert_color_values(
    values: ArrayLike,
    source: SpaceLike,
    target: SpaceLike,
) -> NDArray[np.float64]:
    """
    Convert color values between any two supported spaces via XYZ.

    Args:
        values: Array of shape (..., 3) in ``source`` channel order
        source: Source space identifier
        target: Target space identifier

    Returns:
        Array of shape (..., 3) in ``target`` channel order

    Raises:
        InvalidColorSpace: If either identifier is unknown
    """
    src = ColorSpace.parse(source)
    dst = ColorSpace.parse(target)
    if src is dst:
        return np.array(values, dtype=np.float64)
    return from_xyz(to_xyz(values, src), dst)


def project_to_gamut(
    values: ArrayLike,
    space: SpaceLike,
    gamut: GamutLike = GamutPreset.SRGB,
    target: Optional[SpaceLike] = None,
) -> NDArray[np.float64]:
    """
    Clip a color to the [0, 1]³ linear-RGB cube of a gamut.

    Args:
        values: Array of shape (..., 3) in ``space``
        space: Space of ``values``
        gamut: Gamut whose primaries define the cube
        target: Output space (defaults to ``space``)
    """
    xyz = to_xyz(values, space)
    lin = np.clip(xyz_to_gamut(xyz, gamut), 0.0, 1.0)
    return from_xyz(gamut_to_xyz(lin, gamut), target if target is not None else space)


def is_in_gamut(
    values: ArrayLike,
    space: SpaceLike,
    gamut: GamutLike = GamutPreset.SRGB,
    eps: float = 1e-6,
) -> NDArray[np.bool_]:
    """True where the color's linear RGB lies inside the gamut cube."""
    lin = xyz_to_gamut(to_xyz(values, space), gamut)
    finite = np.all(np.isfinite(lin), axis=-1)
    inside = np.all((lin >= -eps) & (lin <= 1.0 + eps), axis=-1)
    return finite & inside


def decode_color(hex_color: str, space: SpaceLike) -> NDArray[np.float64]:
    """Decode a hex color into channel values of ``space``."""
    space = ColorSpace.parse(space)
    rgb = hex_to_rgb(hex_color)
    if space is ColorSpace.SRGB:
        return rgb
    if space is ColorSpace.HSL:
        return rgb_to_hsl(rgb)
    return from_xyz(srgb_to_xyz(rgb), space)


def decode_colors(hex_colors: Sequence[str], space: SpaceLike) -> NDArray[np.float64]:
    """Decode many hex colors into an (N, 3) array of ``space`` values."""
    if len(hex_colors) == 0:
        return np.empty((0, 3), dtype=np.float64)
    return np.stack([decode_color(h, space) for h in hex_colors])


def encode_color(values: ArrayLike, space: SpaceLike) -> str:
    """Encode channel values of ``space`` as a hex color (sRGB-clipped)."""
    space = ColorSpace.parse(space)
    values = np.asarray(values, dtype=np.float64)
    if space is ColorSpace.SRGB:
        return rgb_to_hex(values)
    if space is ColorSpace.HSL:
        return rgb_to_hex(hsl_to_rgb(values))
    return rgb_to_hex(xyz_to_srgb(to_xyz(values, space)))


def encode_colors(values: ArrayLike, space: SpaceLike) -> list[str]:
    """Encode an (N, 3) array of ``space`` values as hex colors."""
    values = np.asarray(values, dtype=np.float64).reshape(-1, 3)
    return [encode_color(row, space) for row in values]


# =============================================================================
# Channel ranges
# =============================================================================

CHANNEL_RANGES: dict[ColorSpace, ChannelRange] = {
    ColorSpace.HSL: ChannelRange(ColorSpace.HSL, (0.0, 0.0, 0.0), (360.0, 100.0, 100.0)),
    ColorSpace.LAB: ChannelRange(ColorSpace.LAB, (0.0, -180.0, -180.0), (100.0, 180.0, 180.0)),
    ColorSpace.LCH: ChannelRange(ColorSpace.LCH, (0.0, 0.0, 0.0), (100.0, 230.0, 360.0)),
    ColorSpace.OKLAB: ChannelRange(ColorSpace.OKLAB, (0.0, -0.5, -0.5), (1.0, 0.5, 0.5)),
    ColorSpace.OKLCH: ChannelRange(ColorSpace.OKLCH, (0.0, 0.0, 0.0), (1.0, 0.5, 360.0)),
    # Generous extents for wide-gamut exploration
    ColorSpace.LUV: ChannelRange(ColorSpace.LUV, (0.0, -220.0, -220.0), (100.0, 220.0, 220.0)),
    ColorSpace.JZAZBZ: ChannelRange(ColorSpace.JZAZBZ, (0.0, -0.05, -0.05), (1.0, 0.05, 0.05)),
}


def channel_range(space: SpaceLike) -> ChannelRange:
    """Canonical range of an optimizable space."""
    space = ColorSpace.parse(space)
    try:
        return CHANNEL_RANGES[space]
    except KeyError:
        raise InvalidColorSpace(space.value) from None


def range_from_preset(space: SpaceLike, gamut: GamutLike = GamutPreset.SRGB) -> ChannelRange:
    """
    Channel range scaled for a gamut preset.

    Every non-hue channel is widened about its centre by the preset's
    scale. Hue keeps its full circle.
    """
    base = channel_range(space)
    scale = GamutPreset.parse(gamut).scale
    if scale == 1.0:
        return base
    hue = base.space.hue_index
    mins, maxs = [], []
    for idx, (lo, hi) in enumerate(zip(base.mins, base.maxs)):
        if idx == hue:
            mins.append(lo)
            maxs.append(hi)
            continue
        center = (lo + hi) / 2.0
        half = (hi - lo) / 2.0 * scale
        mins.append(center - half)
        maxs.append(center + half)
    return ChannelRange(base.space, tuple(mins), tuple(maxs))


def _range_arrays(rng: ChannelRange) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    lo = np.asarray(rng.mins, dtype=np.float64)
    hi = np.asarray(rng.maxs, dtype=np.float64)
    return lo, hi


def normalize_with_range(values: ArrayLike, rng: ChannelRange) -> NDArray[np.float64]:
    """
    Map channel values affinely into [0, 1] using ``rng``.

    The hue channel wraps modulo one turn.
    """
    values = np.asarray(values, dtype=np.float64)
    lo, hi = _range_arrays(rng)
    span = np.where(hi - lo == 0, 1.0, hi - lo)
    out = (values - lo) / span
    hue = rng.space.hue_index
    if hue is not None:
        out[..., hue] = np.mod(out[..., hue], 1.0)
    return out


def unscale_with_range(values: ArrayLike, rng: ChannelRange) -> NDArray[np.float64]:
    """Inverse of normalize_with_range. The hue channel wraps."""
    values = np.array(values, dtype=np.float64)
    lo, hi = _range_arrays(rng)
    hue = rng.space.hue_index
    if hue is not None:
        values[..., hue] = np.mod(values[..., hue], 1.0)
    return values * (hi - lo) + lo


def clamp_to_range(values: ArrayLike, rng: ChannelRange) -> NDArray[np.float64]:
    """
    Clamp channel values into ``rng``.

    Linear channels are clipped; the hue channel is wrapped into its extent.
    """
    values = np.array(values, dtype=np.float64)
    lo, hi = _range_arrays(rng)
    out = np.clip(values, lo, hi)
    hue = rng.space.hue_index
    if hue is not None:
        span = (hi[hue] - lo[hue]) or 360.0
        h = values[..., hue]
        wrapped = np.mod(h - lo[hue], span) + lo[hue]
        out[..., hue] = np.where(np.isfinite(h), wrapped, h)
    return out


def effective_range_from_values(values: ArrayLike, space: SpaceLike) -> ChannelRange:
    """
    Observed extent of a set of colors.

    Linear channels take the finite min/max of ``values``; channels with no
    finite data (and the hue channel) keep the canonical extent.
    """
    base = channel_range(space)
    values = np.asarray(values, dtype=np.float64).reshape(-1, 3)
    hue = base.space.hue_index
    mins, maxs = list(base.mins), list(base.maxs)
    for idx in range(3):
        if idx == hue:
            continue
        column = values[:, idx]
        column = column[np.isfinite(column)]
        if column.size:
            mins[idx] = float(column.min())
            maxs[idx] = float(column.max())
    return ChannelRange(base.space, tuple(mins), tuple(maxs))


def effective_range_from_colors(hex_colors: Sequence[str], space: SpaceLike) -> ChannelRange:
    """Observed extent of a hex palette in ``space``."""
    return effective_range_from_values(decode_colors(hex_colors, space), space)
