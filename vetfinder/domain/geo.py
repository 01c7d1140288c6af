from __future__ import annotations

import unicodedata
from dataclasses import dataclass


@dataclass(frozen=True)
class County:
    code: str
    name: str


@dataclass(frozen=True)
class Sector:
    code: str
    name: str


# 41 counties plus București
ROMANIAN_COUNTIES: tuple[County, ...] = (
    County("AB", "Alba"),
    County("AR", "Arad"),
    County("AG", "Argeș"),
    County("BC", "Bacău"),
    County("BH", "Bihor"),
    County("BN", "Bistrița-Năsăud"),
    County("BT", "Botoșani"),
    County("BR", "Brăila"),
    County("BV", "Brașov"),
    County("B", "București"),
    County("BZ", "Buzău"),
    County("CL", "Călărași"),
    County("CS", "Caraș-Severin"),
    County("CJ", "Cluj"),
    County("CT", "Constanța"),
    County("CV", "Covasna"),
    County("DB", "Dâmbovița"),
    County("DJ", "Dolj"),
    County("GL", "Galați"),
    County("GR", "Giurgiu"),
    County("GJ", "Gorj"),
    County("HR", "Harghita"),
    County("HD", "Hunedoara"),
    County("IL", "Ialomița"),
    County("IS", "Iași"),
    County("IF", "Ilfov"),
    County("MM", "Maramureș"),
    County("MH", "Mehedinți"),
    County("MS", "Mureș"),
    County("NT", "Neamț"),
    County("OT", "Olt"),
    County("PH", "Prahova"),
    County("SJ", "Sălaj"),
    County("SM", "Satu Mare"),
    County("SB", "Sibiu"),
    County("SV", "Suceava"),
    County("TR", "Teleorman"),
    County("TM", "Timiș"),
    County("TL", "Tulcea"),
    County("VL", "Vâlcea"),
    County("VS", "Vaslui"),
    County("VN", "Vrancea"),
)

BUCHAREST_SECTORS: tuple[Sector, ...] = (
    Sector("S1", "Sector 1"),
    Sector("S2", "Sector 2"),
    Sector("S3", "Sector 3"),
    Sector("S4", "Sector 4"),
    Sector("S5", "Sector 5"),
    Sector("S6", "Sector 6"),
)

# Starter dataset for the county -> locality dropdown.
ROMANIA_LOCALITIES_BY_COUNTY: dict[str, tuple[str, ...]] = {
    "AB": ("Alba Iulia", "Aiud", "Blaj", "Cugir", "Sebeș"),
    "AG": ("Pitești", "Câmpulung", "Curtea de Argeș", "Mioveni"),
    "AR": ("Arad", "Ineu", "Lipova", "Pecica"),
    "B": ("București",),
    "BC": ("Bacău", "Moinești", "Onești"),
    "BH": ("Oradea", "Beiuș", "Marghita", "Salonta"),
    "BN": ("Bistrița", "Năsăud"),
    "BR": ("Brăila", "Făurei"),
    "BT": ("Botoșani", "Dorohoi"),
    "BV": ("Brașov", "Făgăraș", "Râșnov", "Săcele"),
    "BZ": ("Buzău", "Râmnicu Sărat"),
    "CJ": ("Cluj-Napoca", "Turda", "Dej", "Gherla"),
    "CL": ("Călărași", "Oltenița"),
    "CS": ("Reșița", "Caransebeș"),
    "CT": ("Constanța", "Mangalia", "Medgidia", "Năvodari"),
    "CV": ("Sfântu Gheorghe", "Târgu Secuiesc"),
    "DB": ("Târgoviște", "Moreni"),
    "DJ": ("Craiova", "Băilești", "Calafat"),
    "GJ": ("Târgu Jiu", "Motru"),
    "GL": ("Galați", "Tecuci"),
    "GR": ("Giurgiu", "Bolintin-Vale"),
    "HD": ("Deva", "Hunedoara", "Petroșani"),
    "HR": ("Miercurea Ciuc", "Odorheiu Secuiesc"),
    "IF": ("Voluntari", "Buftea", "Otopeni", "Popești-Leordeni"),
    "IL": ("Slobozia", "Fetești", "Urziceni"),
    "IS": ("Iași", "Pașcani"),
    "MH": ("Drobeta-Turnu Severin", "Orșova"),
    "MM": ("Baia Mare", "Sighetu Marmației"),
    "MS": ("Târgu Mureș", "Reghin", "Sighișoara"),
    "NT": ("Piatra Neamț", "Roman"),
    "OT": ("Slatina", "Caracal"),
    "PH": ("Ploiești", "Câmpina", "Sinaia"),
    "SB": ("Sibiu", "Mediaș"),
    "SJ": ("Zalău", "Jibou"),
    "SM": ("Satu Mare", "Carei"),
    "SV": ("Suceava", "Fălticeni", "Rădăuți"),
    "TL": ("Tulcea", "Măcin"),
    "TM": ("Timișoara", "Lugoj"),
    "TR": ("Alexandria", "Roșiorii de Vede", "Turnu Măgurele"),
    "VL": ("Râmnicu Vâlcea", "Drăgășani"),
    "VN": ("Focșani", "Adjud"),
    "VS": ("Vaslui", "Bârlad", "Huși"),
}


def _fold(value: str) -> str:
    decomposed = unicodedata.normalize("NFKD", value.strip().lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def get_county_name(code: str) -> str | None:
    for county in ROMANIAN_COUNTIES:
        if county.code == code:
            return county.name
    return None


def get_sector_name(code: str) -> str | None:
    for sector in BUCHAREST_SECTORS:
        if sector.code == code:
            return sector.name
    return None


def find_county(value: str | None) -> County | None:
    """Match a county by code ("CJ") or name ("Cluj", "bucuresti")."""
    if not isinstance(value, str) or not value.strip():
        return None
    upper = value.strip().upper()
    folded = _fold(value)
    for county in ROMANIAN_COUNTIES:
        if county.code == upper or _fold(county.name) == folded:
            return county
    return None


def localities_for(county: str | None) -> list[str]:
    match = find_county(county)
    if match is None:
        return []
    return list(ROMANIA_LOCALITIES_BY_COUNTY.get(match.code, ()))
