"""
Reference catalog for the kitchen and wardrobe configurators.

Category names are the selections keys the rule validators read. Each option
carries ``specifications.value``: the value stored in the selections when the
option card is picked. Seeding is idempotent per product type.
"""
import logging
from typing import Any, Dict, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.configurator_schema import OptionCategory as OptionCategorySchema
from app.models.configurator_schema import OptionValue as OptionValueSchema
from app.models.orm_models import OptionCategory, OptionValue, ProductType

logger = logging.getLogger("configurator-seed")

_IMG = "/images/configurator"


def _opt(name: str, value: str, description: str, price_factor: float = 1.0, **specs) -> Dict[str, Any]:
    return {
        "name": name,
        "description": description,
        "price_factor": price_factor,
        "specifications": {"value": value, **specs},
    }


STYLE_OPTIONS = [
    _opt("Modern", "modern", "Contemporary design with clean lines"),
    _opt("Classic", "classic", "Traditional elegance with framed fronts", 1.15),
    _opt("Minimalist", "minimalist", "Handleless, simple and functional"),
]

CORPUS_OPTIONS = [
    _opt("Marine Plywood", "marine_plywood", "Moisture resistant, highest durability", 1.3, thicknessMm=18),
    _opt("MDF", "mdf", "Smooth and stable, paint friendly", 1.1, thicknessMm=18),
    _opt("MR Particle Board", "mr_particle_board", "Moisture-resistant chipboard, best value", 1.0, thicknessMm=16),
]

FACADE_OPTIONS = [
    _opt("Acrylic MDF", "acrylic_mdf", "High-gloss acrylic surface", 1.35, finishes=["high_gloss"]),
    _opt("Lacquered MDF", "lacquered_mdf", "Painted panels, wide color range", 1.25, finishes=["matte", "high_gloss"]),
    _opt("Laminated MDF", "laminated_mdf", "Scratch-resistant laminate", 1.0, finishes=["matte", "textured"]),
    _opt("Natural Veneer", "natural_veneer", "Real wood veneer", 1.5, finishes=["oiled", "lacquered"]),
    _opt("PVC Film", "pvc_film", "Thermo-formed film, budget friendly", 0.9, finishes=["matte", "wood_grain"]),
]

HARDWARE_OPTIONS = [
    _opt("Blum Premium", "blum", "Soft-close hinges and full-extension runners", 1.25),
    _opt("Hettich", "hettich", "German engineered fittings", 1.15),
    _opt("Standard Quality", "standard", "Reliable basic fittings", 1.0),
]

KITCHEN_CATALOG: List[Dict[str, Any]] = [
    {
        "name": "typeAndSize", "title": "Kitchen Layout", "allows_multiple": False,
        "options": [
            _opt("Linear", "linear", "Single wall layout - ideal for compact spaces", minLength=2400),
            _opt("L-Shaped", "l-shaped", "Corner layout - maximizes corner space", 1.1, minLength=2400),
            _opt("U-Shaped", "u-shaped", "Three-wall layout - maximum storage", 1.2, minLength=3000),
            _opt("Island", "island", "Central island with open access", 1.3, minLength=3000),
            _opt("Parallel", "parallel", "Two facing runs - efficient galley", 1.1, minLength=2400),
        ],
    },
    {"name": "style", "title": "Kitchen Style", "options": STYLE_OPTIONS},
    {"name": "corpusMaterial", "title": "Cabinet Body Material", "options": CORPUS_OPTIONS},
    {"name": "facadeMaterial", "title": "Facade Material", "options": FACADE_OPTIONS},
    {
        "name": "countertop", "title": "Countertop",
        "options": [
            _opt("Engineered Quartz", "engineered_quartz", "Non-porous quartz composite", 1.4, thicknessMm=20),
            _opt("Natural Stone", "natural_stone", "Granite or marble slab", 1.6, thicknessMm=30),
            _opt("Sintered Stone", "sintered_stone", "Heat and scratch proof", 1.5, thicknessMm=12),
            _opt(
                "Sintered Stone Full-Height", "sintered_stone_fullheight",
                "Countertop slab continued up the wall", 1.8, thicknessMm=12,
            ),
            _opt("HPL (High Pressure Laminate)", "hpl", "Durable laminate on chipboard", 1.0, thicknessMm=38),
        ],
    },
    {
        "name": "splashback", "title": "Splashback",
        # A full-height slab already covers the wall
        "conditional_display": {
            "hideIf": [
                {"field": "countertop.material", "operator": "equals", "value": "sintered_stone_fullheight"},
            ],
        },
        "options": [
            _opt("Tempered Glass", "glass", "Back-painted tempered glass", 1.2),
            _opt("Ceramic Tile", "tile", "Classic tiled wall", 1.0),
            _opt("Matching Countertop", "countertop_match", "Same material as the countertop", 1.3),
        ],
    },
    {"name": "hardware", "title": "Hardware", "options": HARDWARE_OPTIONS},
]

WARDROBE_CATALOG: List[Dict[str, Any]] = [
    {
        "name": "typeAndSize", "title": "Wardrobe Type",
        "options": [
            _opt("Built-in Wardrobe", "built-in", "Wall-to-wall fitted wardrobe", 1.1, customSize=True),
            _opt("Freestanding Wardrobe", "freestanding", "Independent unit", 1.0, standardSizes=True),
        ],
    },
    {"name": "style", "title": "Wardrobe Style", "options": STYLE_OPTIONS},
    {
        "name": "doorType", "title": "Door System",
        "options": [
            _opt("Sliding Doors", "sliding", "Space-saving sliding system", 1.3, minWidth=1200),
            _opt("Hinged Doors", "hinged", "Traditional opening doors", 1.0, requiresClearance=True),
        ],
    },
    {
        "name": "doorMaterials", "title": "Door Materials", "allows_multiple": True,
        "options": [
            _opt("Lacquered MDF", "lacquered_mdf", "Painted MDF panels", 1.2),
            _opt("Mirror", "mirror", "Safety-backed mirror panels", 1.4, safetyBacked=True),
            _opt("Tinted Glass", "tinted_glass", "Colored glass panels", 1.5),
            _opt("Lacobel", "lacobel", "Back-painted glass, high gloss", 1.6),
        ],
    },
    {
        "name": "slidingSystem", "title": "Sliding System",
        "conditional_display": {
            "showIf": [{"field": "doorType", "operator": "equals", "value": "sliding"}],
        },
        "options": [
            _opt("Top-Hung Aluminium", "top_hung", "Doors hang from the top track", 1.2),
            _opt("Bottom-Rolling", "bottom_rolling", "Doors run on the bottom track", 1.0),
        ],
    },
    {"name": "corpusMaterial", "title": "Carcass Material", "options": CORPUS_OPTIONS},
    {"name": "facadeMaterial", "title": "Facade Material", "options": FACADE_OPTIONS},
    {
        "name": "internalFilling", "title": "Internal Filling", "allows_multiple": True,
        "options": [
            _opt("Shelf", "shelf", "Fixed or adjustable shelf"),
            _opt("Hanging Rod", "rod", "Clothes rail"),
            _opt("Drawer", "drawer", "Internal drawer with soft-close runners", 1.1),
            _opt("Pantograph", "pantograph", "Pull-down hanging lift for tall wardrobes", 1.3, minHeight=1800),
            _opt("Shoe Rack", "shoe_rack", "Angled pull-out shoe rack", 1.05),
        ],
    },
    {"name": "hardware", "title": "Hardware", "options": HARDWARE_OPTIONS},
]

CATALOGS: Dict[str, Dict[str, Any]] = {
    "kitchen": {"display_name": "Kitchen", "categories": KITCHEN_CATALOG},
    "wardrobe": {"display_name": "Wardrobe", "categories": WARDROBE_CATALOG},
}


async def seed_catalog(session: AsyncSession) -> List[str]:
    """Insert missing product types with their catalog. Returns the names created."""
    created: List[str] = []
    for name, catalog in CATALOGS.items():
        existing = await session.execute(select(ProductType).where(ProductType.name == name))
        if existing.scalar_one_or_none() is not None:
            continue

        product = ProductType(name=name, display_name=catalog["display_name"], is_active=True)
        session.add(product)
        await session.flush()

        for step_order, cat in enumerate(catalog["categories"], start=1):
            category = OptionCategory(
                product_type_id=product.id,
                name=cat["name"],
                title=cat["title"],
                step_order=step_order,
                is_required=cat.get("is_required", True),
                allows_multiple=cat.get("allows_multiple", False),
                conditional_display=cat.get("conditional_display"),
            )
            session.add(category)
            await session.flush()
            for display_order, opt in enumerate(cat["options"], start=1):
                session.add(OptionValue(
                    category_id=category.id,
                    name=opt["name"],
                    description=opt["description"],
                    image_url=f"{_IMG}/{name}/{opt['specifications']['value']}.jpg",
                    price_factor=opt["price_factor"],
                    specifications=opt["specifications"],
                    display_order=display_order,
                    is_available=True,
                ))
        created.append(name)
        logger.info("Seeded %s catalog (%d steps)", name, len(catalog["categories"]))

    await session.commit()
    return created


def catalog_categories(product_type: str) -> List[OptionCategorySchema]:
    """The reference catalog as wizard categories, without touching the database."""
    catalog = CATALOGS.get(product_type)
    if catalog is None:
        return []
    return [
        OptionCategorySchema(
            id=f"{product_type}-{cat['name']}",
            name=cat["name"],
            title=cat["title"],
            step_order=step_order,
            is_required=cat.get("is_required", True),
            allows_multiple=cat.get("allows_multiple", False),
            conditional_display=cat.get("conditional_display"),
            options=[
                OptionValueSchema(
                    id=f"{product_type}-{cat['name']}-{opt['specifications']['value']}",
                    name=opt["name"],
                    description=opt["description"],
                    price_factor=opt["price_factor"],
                    specifications=opt["specifications"],
                    display_order=display_order,
                )
                for display_order, opt in enumerate(cat["options"], start=1)
            ],
        )
        for step_order, cat in enumerate(catalog["categories"], start=1)
    ]
