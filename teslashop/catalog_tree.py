"""
Tesla parts catalog definition.

One table of main categories (two-digit group code, upper-case title) and their
subcategories (four-digit code, title, description). Model 3 and Model Y share
the same groups; only the naming convention applied on top differs (see
category_naming).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class SubCategory:
    code: str
    title: str
    description: str


@dataclass(frozen=True)
class MainCategory:
    code: str
    title: str
    description: str  # "{model}" is replaced with the model display name
    subcategories: tuple[SubCategory, ...]


@dataclass
class CategoryNode:
    """A node of a category hierarchy as submitted to auto-setup."""

    name: str
    description: str = ""
    children: list[CategoryNode] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CategoryNode:
        """
        Build a node tree from a nested ``{name, description, children}`` dict.

        Raises:
            ValueError: A node has no name.
        """
        name = str(data.get("name") or "").strip()
        if not name:
            raise ValueError("Every category node needs a name")
        children = [cls.from_dict(child) for child in data.get("children") or []]
        return cls(name=name, description=str(data.get("description") or ""), children=children)

    def to_dict(self) -> dict[str, Any]:
        node: dict[str, Any] = {"name": self.name, "description": self.description}
        if self.children:
            node["children"] = [child.to_dict() for child in self.children]
        return node

    def count(self) -> int:
        return 1 + sum(child.count() for child in self.children)


def _subs(*rows: tuple[str, str, str]) -> tuple[SubCategory, ...]:
    return tuple(SubCategory(code, title, description) for code, title, description in rows)


MAIN_CATEGORIES: tuple[MainCategory, ...] = (
    MainCategory("10", "BODY", "Body components and panels for Tesla {model}", _subs(
        ("1001", "Bumper and Fascia", "Front and rear bumpers, fascia components"),
        ("1010", "Body Panels", "Door panels, quarter panels, body structural components"),
        ("1020", "Windshield and Body Glass", "Glass components including windshield and windows"),
    )),
    MainCategory("33", "BRAKES", "Brake system components for Tesla {model}", _subs(
        ("3301", "Brake Discs and Calipers", "Brake system components and assemblies"),
        ("3303", "Brake Pipes and Hoses", "Brake system components and assemblies"),
        ("3310", "ABS, Traction and Stability Control", "Electronic brake control systems"),
        ("3320", "Electromechanical Brake Booster", "Brake assistance and boosting systems"),
        ("3325", "Brake Pedal", "Brake pedal assemblies and components"),
    )),
    MainCategory("30", "CHASSIS", "Chassis and structural components for Tesla {model}", _subs(
        ("3001", "Chassis and Subframes", "Main chassis structure and subframe components"),
    )),
    MainCategory("11", "CLOSURE COMPONENTS", "Door, trunk, and closure components for Tesla {model}", _subs(
        ("1120", "Trunk", "Trunk lid, latch, and related components"),
        ("1133", "Closure Assist Mechanisms and Hinges", "Door hinges, assist mechanisms, and hardware"),
        ("1145", "Exterior Door Handles", "Exterior door handle assemblies and components"),
        ("1150", "Door Glass Regulators", "Window regulators and glass mechanisms"),
        ("1170", "Seals Body Closures", "Weather seals and closure sealing components"),
    )),
    MainCategory("17", "ELECTRICAL", "Electrical systems and components for Tesla {model}", _subs(
        ("1701", "12V Battery and Fuses", "12V electrical system components"),
        ("1702", "LV Battery", "Low voltage battery systems"),
        ("1710", "Harnesses", "Electrical wiring harnesses"),
        ("1715", "Electronic Control Modules", "ECU and control modules"),
        ("1720", "Radar Sensors", "Radar sensor systems for autopilot"),
        ("1723", "Front Camera", "Front-facing camera systems"),
        ("1724", "Interior Camera", "Interior monitoring camera systems"),
        ("1727", "Parking Sensors", "Ultrasonic parking sensor systems"),
        ("1740", "Exterior Lights", "Headlights, taillights, and exterior lighting"),
        ("1745", "Keyless Entry and Security", "Key fob, security, and access systems"),
        ("1750", "Wipers and Washers", "Windshield wiper and washer systems"),
        ("1753", "Horn", "Horn assemblies and components"),
        ("1755", "Accelerator Pedal", "Electronic accelerator pedal systems"),
        ("1756", "Temperature and Humidity Sensors", "Climate monitoring sensors"),
    )),
    MainCategory("12", "EXTERIOR FITTINGS", "Exterior trim and fitting components for Tesla {model}", _subs(
        ("1201", "Wheel Arch Liners", "Wheel well liners and protective components"),
        ("1203", "Undertray and Diffuser", "Underbody panels and aerodynamic components"),
        ("1205", "Badges and Films", "Exterior badges, emblems, and protective films"),
        ("1207", "License Plate Mountings", "License plate brackets and mounting hardware"),
        ("1209", "Exterior Mirrors", "Side mirrors and mirror components"),
        ("1220", "Exterior Trim", "Exterior trim pieces and moldings"),
        ("1225", "Underhood Trim", "Engine bay trim and protective components"),
    )),
    MainCategory("50", "EXTERNAL CHARGING CONNECTORS", "Charging port and connector components for Tesla {model}", _subs(
        ("5001", "Mobile Connector", "Mobile charging connector and accessories"),
    )),
    MainCategory("39", "FRONT DRIVE UNIT", "Front motor and drive unit components for Tesla {model}", _subs(
        ("3901", "Front Drive Unit Assembly", "Complete front drive unit assemblies"),
        ("3930", "Front Gearbox and Halfshafts", "Front transmission and drive shafts"),
    )),
    MainCategory("44", "HIGH VOLTAGE SYSTEM", "High voltage electrical components for Tesla {model}", _subs(
        ("4401", "Charge System Inlet", "High voltage charging inlet systems"),
        ("4450", "HV Harnesses", "High voltage wiring harnesses"),
    )),
    MainCategory("16", "HV BATTERY SYSTEM", "High voltage battery system components for Tesla {model}", _subs(
        ("1601", "HV Battery Assembly", "High voltage battery pack assemblies"),
        ("1630", "HV Battery Electrical Components", "Battery management and electrical components"),
    )),
    MainCategory("21", "INFOTAINMENT", "Entertainment and information system components for Tesla {model}", _subs(
        ("2107", "Touchscreen", "Center console touchscreen displays"),
        ("2110", "Car Computer", "Main vehicle computer systems"),
        ("2121", "Audio System - Speakers, Subwoofer and Amplifier", "Audio system components"),
        ("2130", "Antenna - AM, FM and HD Radio", "Radio antenna systems"),
        ("2132", "Antenna - GPS", "GPS antenna systems"),
        ("2133", "Antenna - Wi-Fi", "Wi-Fi antenna systems"),
    )),
    MainCategory("14", "INSTRUMENT PANEL", "Dashboard and instrument panel components for Tesla {model}", _subs(
        ("1405", "Instrument Panel", "Dashboard and instrument panel assemblies"),
    )),
    MainCategory("15", "INTERIOR TRIM", "Interior trim and finishing components for Tesla {model}", _subs(
        ("1505", "Interior Mirror and Sun Visors", "Interior mirrors and sun visor assemblies"),
        ("1511", "Trunk Trim", "Trunk interior trim and finishing"),
        ("1513", "Door Trim", "Interior door trim panels and components"),
        ("1518", "Pillar and Sill Trim", "A/B/C pillar and door sill trim"),
        ("1519", "Center Console", "Center console assemblies and components"),
        ("1520", "Headliner", "Roof headliner and overhead trim"),
        ("1524", "Luggage Compartment Trim", "Cargo area trim and finishing"),
        ("1530", "Carpeting and Mats", "Floor carpets and protective mats"),
    )),
    MainCategory("40", "REAR DRIVE UNIT", "Rear motor and drive unit components for Tesla {model}", _subs(
        ("4001", "Rear Drive Unit Assembly", "Complete rear drive unit assemblies"),
        ("4020", "Rear Drive Inverter", "Rear motor inverter systems"),
        ("4030", "Rear Gearbox and Halfshafts", "Rear transmission and drive shafts"),
    )),
    MainCategory("20", "SAFETY AND RESTRAINT", "Safety systems and restraint components for Tesla {model}", _subs(
        ("2001", "Air Bags", "Airbag systems and components"),
        ("2005", "Seat Belts", "Seat belt assemblies and components"),
        ("2010", "Pre-Tensioners", "Seat belt pre-tensioner systems"),
        ("2020", "Sensors", "Safety monitoring sensors"),
    )),
    MainCategory("13", "SEATS", "Seat assemblies and components for Tesla {model}", _subs(
        ("1301", "Front Seat Tracks and Motors", "Front seat adjustment mechanisms and motors"),
        ("1302", "2nd Row Seat Tracks and Motors", "Rear seat adjustment mechanisms and motors"),
        ("1304", "Front Seat Assemblies and Hardware", "Front seat assemblies and mounting hardware"),
        ("1305", "2nd Row Seat Assemblies and Hardware", "Rear seat assemblies and mounting hardware"),
        ("1307", "Front Seat Covers, Pads and Trims", "Front seat upholstery and trim components"),
        ("1308", "2nd Row Seat Covers, Pads and Trims", "Rear seat upholstery and trim components"),
    )),
    MainCategory("32", "STEERING", "Steering system components for Tesla {model}", _subs(
        ("3201", "Steering Rack and Lower Column", "Steering rack and lower column assemblies"),
        ("3205", "Upper Column and Steering Wheel", "Upper steering column and wheel assemblies"),
    )),
    MainCategory("31", "SUSPENSION", "Suspension system components for Tesla {model}", _subs(
        ("3101", "Front Suspension (including Hubs)", "Front suspension system components"),
        ("3103", "Rear Suspension (including Hubs)", "Rear suspension system components"),
        ("3115", "Coil Spring Suspension System", "Coil spring suspension components"),
    )),
    MainCategory("18", "THERMAL MANAGEMENT", "Cooling and thermal management components for Tesla {model}", _subs(
        ("1810", "Cabin HVAC", "Cabin heating, ventilation, and air conditioning"),
        ("1820", "Refrigerant System", "AC refrigerant system components"),
        ("1830", "Cooling System", "Coolant system components"),
        ("1840", "Thermal System", "Thermal management system components"),
        ("1850", "Air Distribution", "Air distribution and duct components"),
    )),
    MainCategory("34", "WHEELS AND TIRES", "Wheels, tires, and related components for Tesla {model}", _subs(
        ("3401", "Wheels", "Wheel assemblies and components"),
        ("3404", "Tire Pressure Monitoring System (TPMS)", "TPMS sensors and components"),
    )),
)

# Upper-case main title -> two-digit group code ("BODY" -> "10")
MAIN_CODE_BY_TITLE: dict[str, str] = {main.title.upper(): main.code for main in MAIN_CATEGORIES}


def main_code_for_title(title: str) -> str | None:
    return MAIN_CODE_BY_TITLE.get(title.strip().upper())


def subcategory_count() -> int:
    return sum(len(main.subcategories) for main in MAIN_CATEGORIES)
