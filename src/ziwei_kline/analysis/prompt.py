"""Prompt text for the external text-generation service.

Only the text is built here; sending it is left to the caller.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional

from kline_core.chart import NatalChart, Palace
from kline_core.models import Trajectory
from ziwei_kline.analysis.phases import TrajectoryPhases, build_phases
from ziwei_kline.analysis.scores import ChartScores

__all__ = [
    "CHAT_SYSTEM_PROMPT_CN",
    "DEVELOPER_PROMPT_CN",
    "SYSTEM_PROMPT_CN",
    "build_chat_context",
    "build_user_prompt",
    "palace_fact",
]


SYSTEM_PROMPT_CN = """你是一个基于结构化数据进行人生分析的道教大师。
白话为主，道教古文为辅；古文用于定调，白话用于解释与落地
你的工作是算命，也是讲玄学，
把已经给你的“数据结果”翻译成现实生活中能理解、能使用的分析。

你的分析要求：
- 具体
- 现实
- 可操作
- 和真实世界强相关

你可以参考的现实对象包括：
- 工作场景（公司环境、岗位选择、晋升、跳槽、创业）
- 财务行为（收入来源、现金流、储蓄与投资、风险承受能力）
- 关系结构（伴侣、家庭成员、同事、合作伙伴）
- 健康与生活习惯（作息、压力水平、恢复能力）
- 不同年龄阶段常见的人生选择与取舍

你的目标是解释趋势和倾向，
而不是给命运结论。"""

ANALYSIS_DIMENSIONS = (
    "总体人生走势",
    "财富与收入结构",
    "事业发展与职业路径",
    "学业与学习能力",
    "婚姻关系稳定性",
    "恋爱与情感互动",
    "身体健康与体能恢复",
    "心理压力与情绪管理",
    "人际关系与社交网络",
    "贵人支持程度",
    "冲突、小人或是非风险",
    "迁移、异地或海外发展",
    "家庭与六亲关系",
    "房产与长期资产",
    "风险事件与波动承受能力",
    "环境与生活方式适配度",
)

DEVELOPER_PROMPT_CN = (
    """输出要求：白话为主，道教古文为辅；古文用于定调，白话用于解释与落地
- 全部使用中文
- 语言直接、具体、偏现实
- 可以使用比喻、象征或修辞
- 解释任何命理、和传统玄学概念。结合命盘
- 不重复输入数据

请按【固定结构】输出以下 16 个分析维度，
每一个维度都必须完整输出以下四个部分：

【结论】
一句话总结该维度的整体趋势。

【依据】
3–5 条原因，必须是结合了命盘的解释。

【可能的风险】
2 条，描述现实中可能遇到的问题。

【建议】
3 条具体、可执行、现实可落地的建议。

必须输出的 16 个维度（顺序不要改）：

"""
    + "\n".join(f"{index}. {name}" for index, name in enumerate(ANALYSIS_DIMENSIONS, start=1))
    + """

不要添加额外维度。
不要添加总结段。
不要使用标题以外的修辞性文字。"""
)

CHAT_SYSTEM_PROMPT_CN = """你是“玄策真人”，以贫道自称。一位资深命理与风水大师，也是思维严谨的策略顾问。
你说话要自信、老练、具体，不要空泛套话。可以有古文风
你擅长把命盘与运势趋势，转译成现实生活里的选择建议（工作、金钱、关系、健康、居住环境）。
白话为主，道教古文为辅；古文用于定调，白话用于解释与落地
当用户问得太宽泛时，你要主动把问题收敛成几个具体选项，并给出你建议的选项与理由。

硬性输出要求：白话为主，道教古文为辅；古文用于定调，白话用于解释与落地
- 全中文
- 不要长篇大论：默认 250–500 中文字；用户要求详细再展开
- 必须引用“上下文里给你的信息”（命盘摘要、K线阶段、评分）来回答
- 不要编造上下文里没有的数据；没有就说“我在当前盘面信息里看不到，需要你补充…”
- 避免泛泛的鸡汤"""

_EMPTY = "无"
_UNKNOWN = "暂无信息"
_SUMMARY_PALACES = ("命宫", "官禄", "财帛", "夫妻")


def _join(values) -> str:
    return " ".join(values) if values else _EMPTY


def palace_fact(chart: NatalChart, name: str, *, with_range: bool = False) -> str:
    """One-line description of the stars of palace ``name``."""

    palace: Optional[Palace] = chart.palace(name)
    if palace is None:
        return f"{name}：暂无数据"
    fact = (
        f"{name}：主星{_join(palace.main_stars)}，"
        f"辅星{_join(palace.sub_stars)}，四化{_join(palace.transforms)}"
    )
    if with_range and palace.decade_range:
        fact += f"，大限{palace.decade_range}"
    return fact


def _prompt_label(start: int, end: int) -> str:
    return f"{start}–{end} 岁"


def build_user_prompt(chart: NatalChart, trajectory: Trajectory, scores: ChartScores) -> str:
    """Analysis request describing scores, key life phases and key palaces."""

    phases = build_phases(trajectory, label=_prompt_label)
    rising = phases.rising or ("暂无明显上升段",)
    falling = phases.falling or ("暂无明显回落段",)
    stable = phases.stable or "暂无明显平台期"

    lines: List[str] = [
        "以下是某人的结构化人生分析结果：",
        f"- 总体运势评分：{scores.total}",
        f"- 财富评分：{scores.wealth}",
        f"- 事业评分：{scores.career}",
        f"- 情感评分：{scores.emotion}",
        f"- 健康评分：{scores.health}",
        "",
        "关键人生阶段：",
        *(f"- {label}：整体上升明显" for label in rising),
        *(f"- {label}：回落明显" for label in falling),
        f"- {stable}：相对稳定",
        "",
        "结构特征摘要：",
        *(f"- {palace_fact(chart, name)}" for name in _SUMMARY_PALACES),
    ]
    return "\n".join(lines)


def _center_value(center: Mapping[str, Any], *keys: str) -> Optional[str]:
    for key in keys:
        value = center.get(key)
        if value:
            return str(value)
    return None


def build_chat_context(
    chart: NatalChart,
    trajectory: Trajectory,
    scores: ChartScores,
    question: str,
    *,
    phases: TrajectoryPhases | None = None,
    sample_every: int = 10,
) -> str:
    """Context block for a follow-up question about the chart."""

    if sample_every <= 0:
        raise ValueError("sample_every must be a positive integer")
    phases = phases or build_phases(trajectory)
    center = chart.center

    lines: List[str] = ["【命盘摘要】"]
    if center:
        lines.append(
            "- 出生：阳历{solar}，阴历{lunar}，时刻{time}，性别{gender}".format(
                solar=_center_value(center, "solarDate", "solar_date") or "暂无",
                lunar=_center_value(center, "lunarDate", "lunar_date") or "暂无",
                time=_center_value(center, "time") or "暂无",
                gender=_center_value(center, "gender") or "暂无",
            )
        )
    transforms = center.get("fourTransforms") or center.get("four_transforms") or ()
    if isinstance(transforms, str):
        transforms = (transforms,)
    lines.extend(
        [
            f"- 命宫：{_center_value(center, 'fatePalace', 'fate_palace') or _UNKNOWN}",
            f"- 身宫：{_center_value(center, 'bodyPalace', 'body_palace') or _UNKNOWN}",
            "- 官禄宫：官禄",
            "- 财帛宫：财帛",
            "- 夫妻宫：夫妻",
            "- 疾厄宫：疾厄",
            f"- 四化重点：{_join(tuple(str(item) for item in transforms))}",
        ]
    )
    lines.extend(f"- {palace_fact(chart, palace.name, with_range=True)}" for palace in chart.palaces)

    lines.extend(
        [
            "【评分概览】",
            f"- 总体：{scores.total}/100",
            f"- 财富：{scores.wealth}/100",
            f"- 事业：{scores.career}/100",
            f"- 情感：{scores.emotion}/100",
            f"- 健康：{scores.health}/100",
            "【K线关键信息】",
            f"- 上升段：{'，'.join(phases.rising) or '暂无明显上升段'}",
            f"- 回撤段：{'，'.join(phases.falling) or '暂无明显回撤段'}",
            f"- 平台段：{phases.stable or '暂无明显平台段'}",
        ]
    )
    keypoints = [f"{point.age}岁={point.luck}" for point in trajectory if point.age % sample_every == 0]
    if keypoints:
        lines.append(f"- 关键点：{'，'.join(keypoints)}")
    lines.extend(["【用户问题】", question])
    return "\n".join(lines)
