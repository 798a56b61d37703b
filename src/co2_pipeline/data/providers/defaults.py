# Reference inputs and the Texas demonstration map used by the CLI and examples.
import json
from pathlib import Path
from typing import List, Optional, Tuple, Union

from ...domain.models import ModelInputs
from ...domain.route.features import ExistingPipeline, TerrainZone


def default_inputs() -> ModelInputs:
    """Reference case: 8.625 in X70, 100 mi, 1 Mt/yr, Texas, average cost model"""
    return ModelInputs()


def load_inputs(path: Optional[Union[str, Path]] = None) -> ModelInputs:
    """Read a JSON config; omitted groups and fields keep their reference values."""
    if path is None:
        return default_inputs()
    return ModelInputs.model_validate_json(Path(path).read_text())


def load_points(path: Union[str, Path]) -> List[Tuple[float, float]]:
    """Route points from a JSON list of [x, y] pairs"""
    return [(float(x), float(y)) for x, y in json.loads(Path(path).read_text())]


class TexasMapProvider:
    """Terrain zones and existing pipelines of the demonstration map (pixel coordinates)"""

    def get_terrain_zones(self) -> List[TerrainZone]:
        return [
            TerrainZone("permian", "Permian Basin", "flat_dry",
                        "M 100 180 L 180 160 L 200 220 L 180 280 L 120 300 L 80 260 Z",
                        "Flat desert, oil fields"),
            TerrainZone("hillcountry", "Hill Country", "rolling_hills",
                        "M 250 280 L 320 260 L 350 300 L 340 360 L 280 380 L 240 340 Z",
                        "Rolling limestone hills"),
            TerrainZone("davis", "Davis Mountains", "mountainous",
                        "M 60 240 L 100 220 L 120 260 L 100 300 L 60 280 Z",
                        "Mountain terrain"),
            TerrainZone("gulfcoast", "Gulf Coast", "marsh_wetland",
                        "M 300 400 L 380 380 L 450 420 L 480 450 L 420 480 L 350 470 L 300 450 Z",
                        "Coastal wetlands"),
            TerrainZone("brazos", "Brazos River", "river",
                        "M 300 200 L 310 200 L 340 300 L 350 380 L 340 380 L 310 300 L 290 200 Z",
                        "River crossing"),
            TerrainZone("dfw", "DFW Metro", "high_population",
                        "M 320 180 L 380 170 L 400 210 L 380 250 L 330 240 L 310 200 Z",
                        "High population density"),
            TerrainZone("houston", "Houston Metro", "high_population",
                        "M 400 360 L 450 340 L 480 380 L 460 420 L 410 400 Z",
                        "High population density"),
            TerrainZone("shallowgulf", "Shallow Gulf", "shallow_offshore",
                        "M 300 480 L 400 470 L 480 490 L 520 520 L 480 550 L 380 560 L 300 540 L 280 510 Z",
                        "Shallow water <200m"),
            TerrainZone("deepgulf", "Deep Gulf", "deep_offshore",
                        "M 320 550 L 460 560 L 520 580 L 540 620 L 480 640 L 380 630 L 300 600 L 290 570 Z",
                        "Deep water >200m"),
        ]

    def get_existing_pipelines(self) -> List[ExistingPipeline]:
        return [
            ExistingPipeline("kinder1", "Kinder Morgan EPNG",
                             ((100, 250), (200, 240), (300, 260), (400, 300), (450, 350))),
            ExistingPipeline("enterprise", "Enterprise Products",
                             ((150, 300), (250, 320), (350, 340), (420, 380))),
            ExistingPipeline("energy_transfer", "Energy Transfer",
                             ((340, 180), (360, 240), (380, 300), (400, 360), (430, 400))),
            ExistingPipeline("gulf_south", "Gulf South Pipeline",
                             ((450, 380), (480, 420), (500, 480))),
            ExistingPipeline("permian_hw", "Permian Highway",
                             ((120, 240), (180, 280), (260, 340), (340, 380), (400, 400))),
        ]
