"""Default market catalogs.

Companies, event pools, tax regimes and the ordered neuron-name lists that fix
the input layout of every network in the simulation. Configuration sections
that are omitted fall back to these values.
"""
from __future__ import annotations

from typing import Any

# ============================================================================
# Neuron layouts
# ============================================================================

INDICATOR_NEURONS: tuple[str, ...] = (
    "momentum_5d", "momentum_10d", "momentum_20d", "momentum_50d", "momentum_1d_vs_avg5d",
    "trend_price_vs_sma_10", "trend_price_vs_sma_20", "trend_price_vs_sma_50",
    "trend_price_vs_sma_100", "trend_price_vs_sma_200",
    "trend_sma_crossover_10_20", "trend_sma_crossover_20_50", "trend_sma_crossover_50_200",
    "trend_price_vs_ema_10", "trend_price_vs_ema_20", "trend_price_vs_ema_50",
    "trend_ema_crossover_10_20", "trend_ema_crossover_20_50",
    "oscillator_rsi_7_contrarian", "oscillator_rsi_14_contrarian", "oscillator_rsi_21_contrarian",
    "oscillator_stochastic_k_14_contrarian",
    "volatility_bollinger_bandwidth_20", "volatility_bollinger_percent_b_20",
    "macd_histogram",
    "volume_avg_20d_spike", "volume_obv_trend_20d", "volume_cmf_20",
    "volatility_atr_14",
    "sector_momentum_50d", "region_momentum_50d",
    "event_sentiment_recent", "event_impact_magnitude", "event_type_is_macro", "event_type_is_corporate",
)

CORPORATE_NEURONS: tuple[str, ...] = (
    "self_momentum_50d", "self_volatility_atr_14", "price_vs_ath",
    "market_momentum_50d", "sector_momentum_50d", "region_momentum_50d", "opportunity_score",
    "event_sentiment_recent", "event_impact_magnitude", "event_type_is_macro", "event_type_is_corporate",
)

NEWS_PICKER_NEURONS: tuple[str, ...] = (
    "market_momentum_50d",
    "market_momentum_200d",
    "market_volatility_atr_20d",
    "market_avg_pe_ratio",
    "positive_event_ratio_30d",
)

# Output slots of the news picker, in order.
NEWS_EVENT_CATEGORIES: tuple[str, ...] = (
    "PositiveNA", "NegativeNA",
    "PositiveEU", "NegativeEU",
    "PositiveAsia", "NegativeAsia",
    "PositiveGlobal", "NegativeGlobal",
    "PoliticalGlobal", "DisasterGlobal",
)

REGIONS: tuple[str, ...] = ("North America", "Europe", "Asia", "Global")

JURISDICTIONS: tuple[str, ...] = ("USA_WA", "USA_CA", "USA_TX", "DE", "JP", "GLOBAL")

# ============================================================================
# Companies
# ============================================================================

DEFAULT_COMPANIES: list[dict[str, Any]] = [
    # Technology
    {"symbol": "AAPL", "name": "Apple Inc.", "sector": "Technology", "region": "North America"},
    {"symbol": "MSFT", "name": "Microsoft Corp.", "sector": "Technology", "region": "North America"},
    {"symbol": "GOOGL", "name": "Alphabet Inc.", "sector": "Technology", "region": "North America"},
    {"symbol": "AMZN", "name": "Amazon.com, Inc.", "sector": "Technology", "region": "North America"},
    {"symbol": "NVDA", "name": "NVIDIA Corp.", "sector": "Technology", "region": "North America"},
    {"symbol": "META", "name": "Meta Platforms, Inc.", "sector": "Technology", "region": "North America"},
    {"symbol": "TSM", "name": "Taiwan Semiconductor", "sector": "Technology", "region": "Asia"},
    {"symbol": "AVGO", "name": "Broadcom Inc.", "sector": "Technology", "region": "North America"},
    {"symbol": "ORCL", "name": "Oracle Corp.", "sector": "Technology", "region": "North America"},
    {"symbol": "CRM", "name": "Salesforce, Inc.", "sector": "Technology", "region": "North America"},
    {"symbol": "SAP", "name": "SAP SE", "sector": "Technology", "region": "Europe"},
    # Health
    {"symbol": "LLY", "name": "Eli Lilly and Co.", "sector": "Health", "region": "North America"},
    {"symbol": "NVO", "name": "Novo Nordisk A/S", "sector": "Health", "region": "Europe"},
    {"symbol": "JNJ", "name": "Johnson & Johnson", "sector": "Health", "region": "North America"},
    {"symbol": "UNH", "name": "UnitedHealth Group", "sector": "Health", "region": "North America"},
    {"symbol": "MRK", "name": "Merck & Co., Inc.", "sector": "Health", "region": "North America"},
    {"symbol": "AZN", "name": "AstraZeneca PLC", "sector": "Health", "region": "Europe"},
    {"symbol": "PFE", "name": "Pfizer Inc.", "sector": "Health", "region": "North America"},
    # Energy
    {"symbol": "XOM", "name": "Exxon Mobil Corp.", "sector": "Energy", "region": "North America"},
    {"symbol": "CVX", "name": "Chevron Corp.", "sector": "Energy", "region": "North America"},
    {"symbol": "SHEL", "name": "Shell plc", "sector": "Energy", "region": "Europe"},
    {"symbol": "TTE", "name": "TotalEnergies SE", "sector": "Energy", "region": "Europe"},
    {"symbol": "COP", "name": "ConocoPhillips", "sector": "Energy", "region": "North America"},
    # Finance
    {"symbol": "JPM", "name": "JPMorgan Chase & Co.", "sector": "Finance", "region": "North America"},
    {"symbol": "V", "name": "Visa Inc.", "sector": "Finance", "region": "North America"},
    {"symbol": "MA", "name": "Mastercard Inc.", "sector": "Finance", "region": "North America"},
    {"symbol": "BAC", "name": "Bank of America Corp.", "sector": "Finance", "region": "North America"},
    {"symbol": "WFC", "name": "Wells Fargo & Co.", "sector": "Finance", "region": "North America"},
    {"symbol": "HSBC", "name": "HSBC Holdings plc", "sector": "Finance", "region": "Europe"},
    {"symbol": "MUFG", "name": "Mitsubishi UFJ Financial", "sector": "Finance", "region": "Asia"},
    # Industrials
    {"symbol": "CAT", "name": "Caterpillar Inc.", "sector": "Industrials", "region": "North America"},
    {"symbol": "BA", "name": "The Boeing Company", "sector": "Industrials", "region": "North America"},
    {"symbol": "TM", "name": "Toyota Motor Corp.", "sector": "Industrials", "region": "Asia"},
    {"symbol": "SIEGY", "name": "Siemens AG", "sector": "Industrials", "region": "Europe"},
    {"symbol": "UPS", "name": "United Parcel Service", "sector": "Industrials", "region": "North America"},
    {"symbol": "LMT", "name": "Lockheed Martin Corp.", "sector": "Industrials", "region": "North America"},
    {"symbol": "RTX", "name": "RTX Corporation", "sector": "Industrials", "region": "North America"},
    # Sector ETFs
    {"symbol": "XTC", "name": "Global Tech ETF", "sector": "Technology", "region": "Global", "is_etf": True},
    {"symbol": "XHV", "name": "Global Health ETF", "sector": "Health", "region": "Global", "is_etf": True},
    {"symbol": "XLE", "name": "Global Energy ETF", "sector": "Energy", "region": "Global", "is_etf": True},
    {"symbol": "XLF", "name": "Global Finance ETF", "sector": "Finance", "region": "Global", "is_etf": True},
    {"symbol": "XLI", "name": "Global Industrials ETF", "sector": "Industrials", "region": "Global", "is_etf": True},
]

# ============================================================================
# Event pools
# ============================================================================

DEFAULT_CORPORATE_EVENTS: dict[str, dict[str, list[dict[str, Any]]]] = {
    "Technology": {
        "positive": [
            {"name": "New Patent Approved", "description": "A key patent for a new technology has been approved.", "impact": 1.05, "kind": "positive"},
            {"name": "Successful AI Launch", "description": "A new AI product launch exceeds all sales expectations.", "impact": 1.08, "kind": "positive"},
        ],
        "negative": [
            {"name": "Major Data Breach", "description": "A significant data breach has compromised user data.", "impact": 0.92, "kind": "negative"},
            {"name": "Antitrust Lawsuit", "description": "Government files an antitrust lawsuit against the company.", "impact": 0.90, "kind": "negative"},
        ],
        "neutral": [
            {"name": "Routine Software Update", "description": "A routine software update is released.", "kind": "neutral"},
        ],
    },
    "Health": {
        "positive": [
            {"name": "FDA Approval", "description": "A new drug receives full FDA approval.", "impact": 1.15, "kind": "positive"},
        ],
        "negative": [
            {"name": "Failed Clinical Trial", "description": "A promising drug fails its Phase III clinical trials.", "impact": 0.80, "kind": "negative"},
        ],
        "neutral": [
            {"name": "Medical Conference Presentation", "description": "Company presents research at a major medical conference.", "kind": "neutral"},
        ],
    },
    "Energy": {
        "positive": [
            {"name": "New Oil Field Discovery", "description": "A massive new oil field is discovered.", "impact": 1.10, "kind": "positive"},
        ],
        "negative": [
            {"name": "Oil Spill Incident", "description": "An oil spill has caused significant environmental damage.", "impact": 0.88, "kind": "negative"},
        ],
        "neutral": [
            {"name": "Routine Maintenance Shutdown", "description": "A refinery undergoes scheduled maintenance.", "kind": "neutral"},
        ],
    },
    "Finance": {
        "positive": [
            {"name": "Positive Earnings Surprise", "description": "Quarterly earnings significantly beat analyst expectations.", "impact": 1.07, "kind": "positive"},
        ],
        "negative": [
            {"name": "SEC Investigation", "description": "The SEC has opened an investigation into the company's accounting practices.", "impact": 0.91, "kind": "negative"},
        ],
        "neutral": [
            {"name": "New Branch Opening", "description": "A new branch is opened in a major city.", "kind": "neutral"},
        ],
    },
    "Industrials": {
        "positive": [
            {"name": "Major Government Contract", "description": "The company wins a large, multi-year government contract.", "impact": 1.09, "kind": "positive"},
        ],
        "negative": [
            {"name": "Factory Worker Strike", "description": "Workers at a major factory have gone on strike.", "impact": 0.94, "kind": "negative"},
        ],
        "neutral": [
            {"name": "Supply Chain Optimization", "description": "Company announces a new supply chain optimization plan.", "kind": "neutral"},
        ],
    },
}

DEFAULT_MACRO_EVENTS: list[dict[str, Any]] = [
    {"name": "Interest Rate Hike", "description": "The Federal Reserve unexpectedly raises interest rates, cooling the economy.",
     "impact": {"North America": 0.98, "Europe": 0.99, "Asia": 0.99}, "kind": "negative", "region": "North America", "category": "NegativeNA"},
    {"name": "Interest Rate Cut", "description": "The European Central Bank cuts rates to stimulate growth.",
     "impact": {"Europe": 1.02, "North America": 1.005, "Asia": 1.005}, "kind": "positive", "region": "Europe", "category": "PositiveEU"},
    {"name": "Positive Jobs Report", "description": "The North American jobs report is much stronger than expected.",
     "impact": {"North America": 1.01, "Europe": 1.002, "Asia": 1.002}, "kind": "positive", "region": "North America", "category": "PositiveNA"},
    {"name": "Geopolitical Tensions Flare", "description": "New geopolitical tensions flare up overseas, affecting global markets.",
     "impact": 0.99, "kind": "political", "region": "Global", "category": "PoliticalGlobal"},
    {"name": "Asian Manufacturing Boom", "description": "Asian manufacturing data shows a massive boom, exceeding all forecasts.",
     "impact": {"Asia": 1.025, "North America": 1.005, "Europe": 1.005}, "kind": "positive", "region": "Asia", "category": "PositiveAsia"},
    {"name": "Major Hurricane Forms", "description": "A category 5 hurricane is threatening major coastal industrial zones, disrupting shipping and energy production.",
     "impact": 0.985, "kind": "disaster", "region": "North America", "category": "DisasterGlobal"},
    {"name": "Key Global Trade Deal Signed", "description": "A new international trade agreement is signed between major economic blocs, expected to boost exports and reduce tariffs.",
     "impact": 1.015, "kind": "political", "region": "Global", "category": "PoliticalGlobal"},
    {"name": "Snap Election Called", "description": "A surprise election in a key European market introduces significant political uncertainty.",
     "impact": {"Europe": 0.99, "North America": 0.998, "Asia": 0.998}, "kind": "political", "region": "Europe", "category": "NegativeEU"},
    {"name": "Massive Earthquake Strikes", "description": "A powerful earthquake has disrupted supply chains in a critical Asian microchip manufacturing region.",
     "impact": {"Asia": 0.97, "North America": 0.99, "Europe": 0.99}, "kind": "disaster", "region": "Asia", "category": "DisasterGlobal"},
    {"name": "Global Infrastructure Bill", "description": "A massive global infrastructure spending bill is passed, promising to boost the Industrials and Energy sectors worldwide.",
     "impact": 1.02, "kind": "political", "region": "Global", "category": "PositiveGlobal"},
    {"name": "Widespread Flooding", "description": "Unprecedented flooding across key agricultural regions is expected to impact food prices and related industries.",
     "impact": 0.99, "kind": "disaster", "region": "Global", "category": "DisasterGlobal"},
    {"name": "New Tech Sector Regulations", "description": "Governments announce sweeping new regulations for the tech sector, impacting data privacy and competition.",
     "impact": {"Technology": 0.95}, "kind": "political", "region": "Global", "category": "PoliticalGlobal"},
    {"name": "Global Trade War Escalates", "description": "A trade war between major economic blocs escalates, with new tariffs announced on a wide range of goods.",
     "impact": 0.97, "kind": "political", "region": "Global", "category": "PoliticalGlobal"},
    {"name": "Major Cyber Attack", "description": "A sophisticated cyber attack disrupts financial networks across Europe, causing temporary market chaos.",
     "impact": {"Europe": 0.98, "Finance": 0.96}, "kind": "disaster", "region": "Europe", "category": "DisasterGlobal"},
    {"name": "Widespread Wildfires", "description": "Severe wildfires in key industrial and residential zones are causing massive economic disruption and supply chain issues.",
     "impact": 0.98, "kind": "disaster", "region": "North America", "category": "DisasterGlobal"},
    {"name": "Sudden Diplomatic Thaw", "description": "A surprising diplomatic breakthrough between rival nations eases long-standing tensions, boosting investor confidence.",
     "impact": 1.01, "kind": "political", "region": "Global", "category": "PoliticalGlobal"},
    {"name": "Global Famine Warning", "description": "International agencies issue a severe famine warning for several regions, impacting agricultural commodities.",
     "impact": {"Industrials": 1.02, "default": 0.99}, "kind": "disaster", "region": "Global", "category": "DisasterGlobal"},
    {"name": "Energy Sanctions Imposed", "description": "Major energy-producing nations face new international sanctions, causing a spike in global energy prices.",
     "impact": {"Energy": 1.10, "default": 0.98}, "kind": "political", "region": "Global", "category": "PoliticalGlobal"},
    {"name": "Unexpected Political Scandal", "description": "A major political scandal in an Asian economic power leads to leadership uncertainty and market jitters.",
     "impact": {"Asia": 0.98}, "kind": "political", "region": "Asia", "category": "NegativeAsia"},
]

# ============================================================================
# Taxes
# ============================================================================

DEFAULT_TAX_REGIMES: dict[str, dict[str, Any]] = {
    "USA_WA": {"ltcg_rate": 0.07, "ltcg_exemption": 250_000, "stcg_rate": 0.0,
               "description": "Washington state: 7% long-term gains tax above $250k."},
    "USA_CA": {"ltcg_rate": 0.093, "stcg_rate": 0.093,
               "description": "California: 9.3% income tax on all capital gains."},
    "USA_TX": {"ltcg_rate": 0.0, "stcg_rate": 0.0,
               "description": "Texas: no state tax on capital gains."},
    "DE": {"ltcg_rate": 0.264, "stcg_rate": 0.264, "ltcg_exemption": 1_000,
           "description": "Germany: flat 26.4% on all gains with a small exemption."},
    "JP": {"ltcg_rate": 0.203, "stcg_rate": 0.203,
           "description": "Japan: flat 20.3% on all capital gains."},
    "GLOBAL": {"ltcg_rate": 0.15, "stcg_rate": 0.25,
               "description": "Global average: simplified progressive-like model."},
}

# Annual gross-receipts style drag, applied daily as rate / 365.
DEFAULT_REGIONAL_DRAG_RATES: dict[str, float] = {
    "North America": 0.00471,
    "Europe": 0.0055,
    "Asia": 0.0052,
    "Global": 0.0050,
}

DEFAULT_SECTOR_DRAG_RATES: dict[str, float] = {
    "Technology": 0.0175,
    "Health": 0.015,
    "Energy": 0.00484,
    "Finance": 0.012,
    "Industrials": 0.00484,
}

# ============================================================================
# Names
# ============================================================================

STRATEGY_NAMES: tuple[str, ...] = (
    "Momentum Bot", "Value Seeker", "Quant Algo", "Risk Manager", "Trend Follower", "Contrarian",
    "Growth Chaser", "Index Follower", "Volatility Trader", "Sector Rotator", "Alpha Hunter",
)

CHAOS_AGENT_NAMES: tuple[str, ...] = (
    "Noise Trader", "Random Walk Inc.", "Volatility Catalyst", "Chaos Agent", "Momentum Gambler",
    "Arbitrageur Prime", "The Contrarian", "Market Agitator", "Event Horizon Capital", "Stochastic Dynamics",
)

APEX_FUND_NAMES: tuple[str, ...] = (
    "Singularity Capital", "Orion Quant Labs", "Titan Global Macro", "Helios Analytics", "Vanguard Prime",
)

QUANT_FUND_NAMES: tuple[str, ...] = (
    "Momentum Machines", "Arbitrage Dynamics", "Vector Capital", "Cipher Trading", "Quantum Edge",
)

RETAIL_STRATEGY_NAMES: tuple[str, ...] = (
    "Trend Follower", "Value Seeker", "Growth Chaser", "Retirement Fund", "Day Trader",
)
