import numpy as np
from numba import njit

# =========================================================
# Numba 加速核函数
# 所有核函数都按 IteratorSteps 的方式遍历选区:
#   start, column_step, row_skip, row_skip_alt, width, height
# 与 SelectionIterator 访问完全相同的像素，只做加法。
# =========================================================

HISTOGRAM_BINS = 65536

ACTION_GET_A = 0
ACTION_BLEND = 1


@njit(cache=True)
def selection_moments(samples, start, column_step, row_skip, row_skip_alt, width, height):
    """
    单次遍历的最小/最大值及逐行的 Σx、Σx²
    逐行部分和用 int64 足够 (65535² × 行宽)，总和由调用方用 Python int 精确累加
    """
    row_sum = np.zeros(height, dtype=np.int64)
    row_sum_sq = np.zeros(height, dtype=np.int64)
    lo = np.int64(samples[start])
    hi = lo
    offset = start
    for r in range(height):
        s = np.int64(0)
        s2 = np.int64(0)
        for c in range(width):
            v = np.int64(samples[offset])
            if v > hi:
                hi = v
            elif v < lo:
                lo = v
            s += v
            s2 += v * v
            if c < width - 1:
                offset += column_step
        row_sum[r] = s
        row_sum_sq[r] = s2
        offset += row_skip
        row_skip, row_skip_alt = row_skip_alt, row_skip
    return lo, hi, row_sum, row_sum_sq


@njit(cache=True)
def paired_moments(samples_a, start_a, step_a, skip_a, skip_alt_a,
                   samples_b, start_b, step_b, skip_b, skip_alt_b,
                   width, height):
    """
    两个同尺寸选区的成对遍历
    返回 A、B 的极值以及逐行的 ΣA、ΣA²、ΣB、ΣB²、Σd、Σd² (d = A - B)
    """
    sums = np.zeros((6, height), dtype=np.int64)
    lo_a = np.int64(samples_a[start_a])
    hi_a = lo_a
    lo_b = np.int64(samples_b[start_b])
    hi_b = lo_b
    off_a = start_a
    off_b = start_b
    for r in range(height):
        sa = np.int64(0)
        sa2 = np.int64(0)
        sb = np.int64(0)
        sb2 = np.int64(0)
        sd = np.int64(0)
        sd2 = np.int64(0)
        for c in range(width):
            a = np.int64(samples_a[off_a])
            b = np.int64(samples_b[off_b])
            if a > hi_a:
                hi_a = a
            elif a < lo_a:
                lo_a = a
            if b > hi_b:
                hi_b = b
            elif b < lo_b:
                lo_b = b
            d = a - b
            sa += a
            sa2 += a * a
            sb += b
            sb2 += b * b
            sd += d
            sd2 += d * d
            if c < width - 1:
                off_a += step_a
                off_b += step_b
        sums[0, r] = sa
        sums[1, r] = sa2
        sums[2, r] = sb
        sums[3, r] = sb2
        sums[4, r] = sd
        sums[5, r] = sd2
        off_a += skip_a
        off_b += skip_b
        skip_a, skip_alt_a = skip_alt_a, skip_a
        skip_b, skip_alt_b = skip_alt_b, skip_b
    return lo_a, hi_a, lo_b, hi_b, sums


@njit(cache=True)
def selection_histogram(samples, start, column_step, row_skip, row_skip_alt, width, height):
    """每个 16-bit 取值的频数"""
    counts = np.zeros(HISTOGRAM_BINS, dtype=np.int64)
    offset = start
    for r in range(height):
        for c in range(width):
            counts[samples[offset]] += 1
            if c < width - 1:
                offset += column_step
        offset += row_skip
        row_skip, row_skip_alt = row_skip_alt, row_skip
    return counts


@njit(cache=True)
def _round_output(value):
    # 输出 = round_half_up(0.5 + value)，并限制在 16-bit 范围内
    v = np.floor(0.5 + value + 0.5)
    if v < 0.0:
        return np.uint16(0)
    if v > 65535.0:
        return np.uint16(65535)
    return np.uint16(v)


@njit(cache=True)
def dpraw_merge(combined, secondary, out, starts, column_step, row_skips, row_skip_alts,
                width, height, black_combined, black_secondary, white, scale, action, bayer):
    """
    双像素 RAW 合成 (原位写入 out)

    四个 Bayer 位置 (R, G1, G2, B) 同步遍历，三幅图像尺寸相同，共用同一组偏移。
    Plain 模式: 每个位置独立判断是否达到白电平
    Bayer 模式: 2x2 单元内任一位置达到白电平，整个单元走剪切分支
    """
    offsets = starts.copy()
    skips = row_skips.copy()
    skips_alt = row_skip_alts.copy()
    for r in range(height):
        for c in range(width):
            cell_clipped = False
            if bayer:
                for k in range(4):
                    if combined[offsets[k]] >= white:
                        cell_clipped = True
            for k in range(4):
                o = offsets[k]
                ab = combined[o]
                b = secondary[o]
                clipped = cell_clipped if bayer else ab >= white
                if action == ACTION_GET_A:
                    if clipped:
                        out[o] = np.uint16(white) if bayer else b
                    else:
                        out[o] = _round_output((ab - black_combined[k]) - (b - black_secondary[k])
                                               + black_secondary[k])
                else:
                    if clipped:
                        out[o] = b
                    else:
                        out[o] = _round_output((ab - black_combined[k]) * scale + black_secondary[k])
            if c < width - 1:
                for k in range(4):
                    offsets[k] += column_step
        for k in range(4):
            offsets[k] += skips[k]
            skips[k], skips_alt[k] = skips_alt[k], skips[k]


@njit(cache=True)
def clipping_preview(samples, starts, column_step, row_skips, row_skip_alts, width, height,
                     black, white, gamma_table, full_scale, out):
    """
    快速预览: 每个 2x2 Bayer 单元 -> 一个 RGB 像素
    未剪切: 灰度 = gamma(平均信号 / (白电平 - 平均黑电平))
    剪切: 被剪切的滤色片以满量程显示对应颜色 (全部剪切 = 白色)
    """
    offsets = starts.copy()
    skips = row_skips.copy()
    skips_alt = row_skip_alts.copy()
    black_mean = (black[0] + black[1] + black[2] + black[3]) / 4.0
    span = white - black_mean
    last = gamma_table.shape[0] - 1
    for r in range(height):
        for c in range(width):
            r_val = samples[offsets[0]]
            g1_val = samples[offsets[1]]
            g2_val = samples[offsets[2]]
            b_val = samples[offsets[3]]
            clip_r = r_val >= white
            clip_g = g1_val >= white or g2_val >= white
            clip_b = b_val >= white
            if clip_r or clip_g or clip_b:
                out[r, c, 0] = full_scale if clip_r else 0
                out[r, c, 1] = full_scale if clip_g else 0
                out[r, c, 2] = full_scale if clip_b else 0
            else:
                signal = ((r_val - black[0]) + (g1_val - black[1])
                          + (g2_val - black[2]) + (b_val - black[3])) / 4.0
                level = signal / span
                if level < 0.0:
                    level = 0.0
                elif level > 1.0:
                    level = 1.0
                grey = gamma_table[int(level * last + 0.5)]
                out[r, c, 0] = grey
                out[r, c, 1] = grey
                out[r, c, 2] = grey
            if c < width - 1:
                for k in range(4):
                    offsets[k] += column_step
        for k in range(4):
            offsets[k] += skips[k]
            skips[k], skips_alt[k] = skips_alt[k], skips[k]


def steps_arrays(selections):
    """
    将一组同尺寸选区的遍历参数打包成 numba 可用的数组

    Returns:
        (starts, column_step, row_skips, row_skip_alts, width, height)
    """
    steps = [s.steps() for s in selections]
    first = steps[0]
    starts = np.array([s.start for s in steps], dtype=np.int64)
    row_skips = np.array([s.row_skip for s in steps], dtype=np.int64)
    row_skip_alts = np.array([s.row_skip_alt for s in steps], dtype=np.int64)
    return starts, first.column_step, row_skips, row_skip_alts, first.width, first.height
