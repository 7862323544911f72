from __future__ import annotations

import pytest

from kline_core.chart import NatalChart
from kline_core.simulator import generate_trajectory
from tests.helpers import (
    build_chart,
    build_palace,
    build_rich_chart,
    stepped_luck,
    trajectory_from_luck,
)
from ziwei_kline.analysis import (
    DEVELOPER_PROMPT_CN,
    ChartScores,
    ToneTheme,
    build_chat_context,
    build_phases,
    build_scores,
    build_tone_proverb,
    build_user_prompt,
    decade_stats,
    format_analysis_with_tone,
    infer_theme,
    palace_density_score,
    split_tone_from_analysis_text,
)
from ziwei_kline.analysis.prompt import palace_fact
from ziwei_kline.analysis.tone import (
    MAX_PROVERB_CHARS,
    PROVERB_POOL,
    TONE_TITLE,
    pick_proverb,
)
from ziwei_kline.examples import sample_chart


def _scores(**overrides: int) -> ChartScores:
    values = dict(total=60, wealth=60, career=60, emotion=60, health=60)
    values.update(overrides)
    return ChartScores(**values)


# ---------------------------------------------------------------------------
# scores


def test_palace_density_score() -> None:
    palace = build_palace("财帛", mains=("武曲", "七杀"), subs=("禄存",), transforms=("化权",))

    assert palace_density_score(palace) == 40 + 12 + 2 + 3
    assert palace_density_score(None) == 50
    assert palace_density_score(build_palace("命宫", mains=("紫微",) * 12)) == 100


def test_build_scores_rounds_half_up() -> None:
    chart = build_chart({"交友": {"subs": ("左辅", "右弼"), "transforms": ("化科",)}})

    scores = build_scores(chart, trajectory_from_luck([50, 51]))

    assert scores.total == 51
    # (40 + 47) / 2 = 43.5
    assert scores.emotion == 44
    assert scores.wealth == scores.career == scores.health == 40


def test_build_scores_with_missing_palaces() -> None:
    chart = NatalChart(palaces=tuple(build_chart().palaces[:4]))

    scores = build_scores(chart, trajectory_from_luck([70] * 101))

    assert scores.as_dict() == {
        "total": 70,
        "wealth": 50,
        "career": 50,
        "emotion": 45,
        "health": 50,
    }


# ---------------------------------------------------------------------------
# phases


def test_decade_stats_cover_age_100() -> None:
    stats = decade_stats(trajectory_from_luck(stepped_luck([10 * i for i in range(10)])))

    assert len(stats) == 10
    assert (stats[-1].start, stats[-1].end) == (90, 100)
    assert stats[-1].mean == pytest.approx(90.0)
    assert all(item.variance == 0.0 for item in stats)


def test_phases_rank_rises_and_falls() -> None:
    trajectory = trajectory_from_luck(stepped_luck([50, 60, 55, 55, 70, 40, 45, 45, 45, 45]))

    phases = build_phases(trajectory)

    assert phases.rising == ("40-49岁", "10-19岁", "60-69岁")
    assert phases.falling == ("50-59岁", "20-29岁")
    # every decade is flat, the first one wins the tie
    assert phases.stable == "0-9岁"
    assert phases.as_dict()["rising"] == ["40-49岁", "10-19岁", "60-69岁"]


def test_small_moves_are_not_phases() -> None:
    phases = build_phases(trajectory_from_luck(stepped_luck([50, 51, 52, 51, 50, 49, 50, 51, 52, 51])))

    assert phases.rising == ()
    assert phases.falling == ()


def test_stable_phase_has_lowest_variance() -> None:
    luck = [50 + (5 if age % 2 else -5) for age in range(101)]
    luck[60:70] = [50] * 10

    assert build_phases(trajectory_from_luck(luck)).stable == "60-69岁"


# ---------------------------------------------------------------------------
# prompts


def test_palace_fact() -> None:
    chart = build_rich_chart()

    assert palace_fact(chart, "命宫") == "命宫：主星紫微 天府，辅星左辅，四化化权"
    assert palace_fact(chart, "田宅") == "田宅：主星天梁，辅星无，四化无"
    assert palace_fact(chart, "命宫", with_range=True).endswith("，大限2-11")
    assert palace_fact(NatalChart(palaces=()), "命宫") == "命宫：暂无数据"


def test_developer_prompt_lists_every_dimension_in_order() -> None:
    assert "1. 总体人生走势" in DEVELOPER_PROMPT_CN
    assert "16. 环境与生活方式适配度" in DEVELOPER_PROMPT_CN


def test_user_prompt_mentions_scores_phases_and_palaces() -> None:
    chart = sample_chart()
    trajectory = generate_trajectory(chart)
    scores = build_scores(chart, trajectory)

    prompt = build_user_prompt(chart, trajectory, scores)

    assert f"- 总体运势评分：{scores.total}" in prompt
    assert f"- 健康评分：{scores.health}" in prompt
    assert "关键人生阶段：" in prompt
    assert "：相对稳定" in prompt
    assert "- 命宫：主星紫微 天府" in prompt
    assert "- 夫妻：主星破军" in prompt


def test_chat_context_includes_center_keypoints_and_question() -> None:
    chart = sample_chart()
    trajectory = generate_trajectory(chart)
    scores = build_scores(chart, trajectory)

    context = build_chat_context(chart, trajectory, scores, "明年适合换工作吗？", sample_every=50)

    lines = context.splitlines()
    assert lines[0] == "【命盘摘要】"
    assert "阳历1990-05-17" in lines[1]
    assert "- 身宫：官禄" in lines
    assert "- 四化重点：太阳化禄 武曲化权 太阴化科 天同化忌" in lines
    assert "- 交友：主星巨门，辅星地空，四化无，大限73-82" in lines
    assert (
        f"- 关键点：0岁={trajectory[0].luck}，50岁={trajectory[50].luck}，100岁={trajectory[100].luck}"
        in lines
    )
    assert lines[-2:] == ["【用户问题】", "明年适合换工作吗？"]


def test_chat_context_without_center_uses_placeholders() -> None:
    chart = build_chart()
    trajectory = trajectory_from_luck([50] * 101)

    context = build_chat_context(chart, trajectory, _scores(), "?")

    assert "- 命宫：暂无信息" in context
    assert "- 四化重点：无" in context
    assert "出生" not in context
    with pytest.raises(ValueError):
        build_chat_context(chart, trajectory, _scores(), "?", sample_every=0)


# ---------------------------------------------------------------------------
# tone


@pytest.mark.parametrize(
    ("luck", "scores", "theme"),
    [
        ([10, 90] * 50 + [10], _scores(), ToneTheme.ANXIOUS_GAIN_LOSS),
        ([40, 80] * 50 + [40], _scores(), ToneTheme.FEAR_OF_LOSS),
        ([40 + (3 * age) // 10 for age in range(101)], _scores(career=75), ToneTheme.HASTE),
        ([70 - (2 * age) // 10 for age in range(101)], _scores(emotion=50), ToneTheme.PAST_AND_FUTURE),
        ([50] * 101, _scores(career=50, wealth=50), ToneTheme.HESITANT_REACH),
        ([50] * 101, _scores(emotion=55), ToneTheme.INDECISION),
        ([50] * 101, _scores(emotion=70), ToneTheme.RESTLESS),
    ],
)
def test_infer_theme(luck, scores: ChartScores, theme: ToneTheme) -> None:
    assert infer_theme(trajectory_from_luck(luck), scores) is theme


def test_proverb_pool_fits_the_length_limit() -> None:
    for theme, items in PROVERB_POOL.items():
        assert items
        for offset in range(len(items)):
            text = pick_proverb(theme, offset)
            assert text == items[offset]
            assert len(text) <= MAX_PROVERB_CHARS


def test_tone_proverb_is_stable_for_the_same_chart() -> None:
    chart = sample_chart()
    trajectory = generate_trajectory(chart)
    scores = build_scores(chart, trajectory)

    first = build_tone_proverb(chart, trajectory, scores)
    second = build_tone_proverb(chart, trajectory, scores)

    assert first == second
    assert first.text in PROVERB_POOL[first.theme]


def test_tone_header_round_trip() -> None:
    proverb = build_tone_proverb(
        sample_chart(), trajectory_from_luck([50] * 101), _scores(career=50, wealth=50)
    )

    text = format_analysis_with_tone(proverb, "  正文第一段\n正文第二段  ")

    assert text.splitlines()[:3] == [TONE_TITLE, proverb.text, ""]
    assert split_tone_from_analysis_text(text) == (proverb.text, "正文第一段\n正文第二段")


def test_split_without_header_returns_the_text_untouched() -> None:
    assert split_tone_from_analysis_text("普通回答") == ("", "普通回答")
    assert split_tone_from_analysis_text("\n\n") == ("", "")
    assert split_tone_from_analysis_text(None) == ("", "")
