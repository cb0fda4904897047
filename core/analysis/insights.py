"""
Narrative insights for a symbol's latest snapshot.

Produces short report sentences (Indonesian, matching the report's audience)
about trend consistency, participation, volatility and momentum.
"""
from typing import List

from ..indicators.technical import moving_average
from ..shared.defaults import MA_PERIOD, RSI_OVERBOUGHT, RSI_OVERSOLD, PARTICIPATION_LOW
from ..shared.types import AnalysisResult, MacdStatus, VolatilityStatus

# Participation sentence uses a stricter "high" bar than the participation context
INSIGHT_HIGH_VOLUME_RATIO = 1.5
STABLE_TREND_DAYS = 5


def consecutive_days_above_ma(closes, period: int = MA_PERIOD) -> int:
    """Consecutive most-recent closes above their own trailing MA (per-bar MA)."""
    ma = moving_average(closes, period).to_numpy()
    count = 0
    for i in range(len(closes) - 1, period - 2, -1):
        if closes[i] > ma[i]:
            count += 1
        else:
            break
    return count


def generate_insights(data: AnalysisResult) -> List[str]:
    history = data.history
    if not history or len(history) < MA_PERIOD:
        return ["Data historis tidak mencukupi untuk analisis mendalam."]

    insights: List[str] = []
    closes = [bar.close for bar in history]

    # Trend consistency
    days_above = consecutive_days_above_ma(closes)
    if days_above >= STABLE_TREND_DAYS:
        insights.append(
            f"Tren Penguatan Stabil: Harga telah bertahan secara konsisten di atas MA-20 "
            f"selama {days_above} hari bursa terakhir."
        )
    elif days_above > 0:
        insights.append(
            f"Indikasi Tren: Harga saat ini berada di atas MA-20, namun baru berlangsung "
            f"selama {days_above} hari bursa."
        )
    else:
        insights.append(
            "Tren Pelemahan: Harga saat ini berada di bawah indikator MA-20, "
            "menunjukkan tekanan jual yang mendominasi."
        )

    # Participation
    if data.volume_ratio > INSIGHT_HIGH_VOLUME_RATIO:
        insights.append(
            f"Partisipasi Tinggi: Volume perdagangan saat ini ({data.volume_ratio:.2f}x rata-rata) "
            f"menunjukkan antusiasme pasar yang signifikan pada level harga ini."
        )
    elif data.volume_ratio < PARTICIPATION_LOW:
        insights.append(
            f"Partisipasi Rendah: Volume berada di bawah rata-rata ({data.volume_ratio:.2f}x), "
            f"menunjukkan pergerakan harga saat ini kurang didukung oleh aktivitas transaksi yang besar."
        )
    else:
        insights.append("Partisipasi Normal: Volume perdagangan sejalan dengan rata-rata 20 hari terakhir.")

    # Volatility
    if data.volatility_status is VolatilityStatus.HIGH:
        insights.append(
            f"Volatilitas Meningkat: ATR relatif ({data.atr_relative:.2f}%) menunjukkan fluktuasi harga "
            f"yang lebih lebar dari biasanya, menandakan risiko pergerakan yang lebih tajam."
        )
    elif data.volatility_status is VolatilityStatus.LOW:
        insights.append(
            f"Volatilitas Rendah: Rentang pergerakan harga menyempit (ATR {data.atr:.0f}), seringkali "
            f"merupakan fase konsolidasi sebelum pergerakan besar berikutnya."
        )
    else:
        insights.append(
            f"Volatilitas Normal: Fluktuasi harga harian stabil di kisaran {data.atr_relative:.2f}% "
            f"dari harga penutupan."
        )

    # Momentum
    if data.rsi > RSI_OVERBOUGHT:
        insights.append(
            f"Status Overbought: RSI ({data.rsi:.2f}) melampaui level 70, mengindikasikan kondisi jenuh beli."
        )
    elif data.rsi < RSI_OVERSOLD:
        insights.append(
            f"Status Oversold: RSI ({data.rsi:.2f}) berada di bawah 30, menunjukkan kondisi jenuh jual."
        )

    if data.macd_status is MacdStatus.BULLISH_CROSSOVER:
        insights.append(
            "Sinyal Momentum: Terjadi persilangan naik (Bullish Crossover) pada MACD, "
            "sinyal awal penguatan momentum."
        )
    elif data.macd_status is MacdStatus.BEARISH_CROSSOVER:
        insights.append(
            "Sinyal Momentum: Terjadi persilangan turun (Bearish Crossover) pada MACD, "
            "sinyal awal pelemahan momentum."
        )

    return insights
