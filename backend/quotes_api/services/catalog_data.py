# quotes_api/services/catalog_data.py
"""
Default product catalog shipped with the API.
Swap in another Catalog (e.g. loaded from a store) via create_app(catalog=...).
"""
from quotes_api.services.catalog import Catalog, CatalogModel, Category, RecommendationRule

DEFAULT_CATALOG = Catalog(
    categories=(
        Category(
            id="water-purifier",
            name="Water Purifier",
            models=(
                CatalogModel("chp-242r", "CHP-242R", 50000),
                CatalogModel("chp-242l", "CHP-242L", 45000),
                CatalogModel("chp-242n", "CHP-242N", 48000),
            ),
        ),
        Category(
            id="air-purifier",
            name="Air Purifier",
            models=(
                CatalogModel("ap-1220r", "AP-1220R", 35000),
                CatalogModel("ap-1220l", "AP-1220L", 32000),
                CatalogModel("ap-1220n", "AP-1220N", 33000),
            ),
        ),
        Category(
            id="rice-cooker",
            name="Pressure Rice Cooker",
            models=(
                CatalogModel("crp-htr0609f", "CRP-HTR0609F", 25000),
                CatalogModel("crp-htr0610f", "CRP-HTR0610F", 28000),
                CatalogModel("crp-htr0611f", "CRP-HTR0611F", 30000),
            ),
        ),
        Category(
            id="steamer",
            name="Steam Oven",
            models=(
                CatalogModel("cs-1001f", "CS-1001F", 40000),
                CatalogModel("cs-1002f", "CS-1002F", 45000),
                CatalogModel("cs-1003f", "CS-1003F", 50000),
            ),
        ),
    ),
    features={
        ("water-purifier", "chp-242r"): ("Large capacity", "UV sterilization", "Smart filter reminder"),
        ("water-purifier", "chp-242l"): ("Compact", "Power saving mode", "Easy filter change"),
        ("water-purifier", "chp-242n"): ("Office use", "High-performance filter", "Self cleaning"),
        ("air-purifier", "ap-1220r"): ("Large capacity", "HEPA filter", "Smart sensor"),
        ("air-purifier", "ap-1220l"): ("Compact", "Ultrasonic humidifier", "Night mode"),
        ("air-purifier", "ap-1220n"): ("Office use", "Electrostatic filter", "Quiet operation"),
        ("rice-cooker", "crp-htr0609f"): ("Basic", "Pressure cooking", "Keep warm"),
        ("rice-cooker", "crp-htr0610f"): ("Multi-function", "Steam cooking", "Timer"),
        ("rice-cooker", "crp-htr0611f"): ("Premium", "IH heating", "Smart cooking"),
        ("steamer", "cs-1001f"): ("Basic", "Steam cooking", "Timer"),
        ("steamer", "cs-1002f"): ("Multi-function", "Oven mode", "Digital control"),
        ("steamer", "cs-1003f"): ("Premium", "Smart cooking", "WiFi"),
    },
    recommendations={
        "individual": (
            RecommendationRule("water-purifier", "chp-242l", "Compact purifier suited to single users", 1),
            RecommendationRule("air-purifier", "ap-1220l", "Air purifier sized for a personal space", 2),
        ),
        "family": (
            RecommendationRule("water-purifier", "chp-242r", "High-capacity purifier for family use", 1),
            RecommendationRule("rice-cooker", "crp-htr0610f", "Multi-function pressure cooker for families", 2),
            RecommendationRule("air-purifier", "ap-1220r", "High-capacity air purifier for shared spaces", 3),
        ),
        "business": (
            RecommendationRule("water-purifier", "chp-242n", "Purifier built for office environments", 1),
            RecommendationRule("steamer", "cs-1002f", "Multi-function steam oven for business use", 2),
        ),
    },
)
