"""Table statique province → numéro de zone de santé (เขตสุขภาพ 1 à 13)."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

_REGIONS: dict[int, tuple[str, ...]] = {
    1: ("เชียงใหม่", "เชียงราย", "ลำปาง", "ลำพูน", "แม่ฮ่องสอน", "น่าน", "พะเยา", "แพร่"),
    2: ("ตาก", "พิษณุโลก", "เพชรบูรณ์", "สุโขทัย", "อุตรดิตถ์"),
    3: ("นครสวรรค์", "อุทัยธานี", "กำแพงเพชร", "พิจิตร", "ชัยนาท"),
    4: ("สระบุรี", "ลพบุรี", "สิงห์บุรี", "อ่างทอง", "นนทบุรี", "ปทุมธานี", "พระนครศรีอยุธยา", "นครนายก"),
    5: ("ราชบุรี", "กาญจนบุรี", "สุพรรณบุรี", "นครปฐม", "สมุทรสงคราม", "สมุทรสาคร", "เพชรบุรี", "ประจวบคีรีขันธ์"),
    6: ("ระยอง", "จันทบุรี", "ตราด", "ชลบุรี", "ฉะเชิงเทรา", "ปราจีนบุรี", "สระแก้ว", "สมุทรปราการ"),
    7: ("ขอนแก่น", "กาฬสินธุ์", "ร้อยเอ็ด", "มหาสารคาม"),
    8: ("อุดรธานี", "หนองคาย", "เลย", "หนองบัวลำภู", "สกลนคร", "นครพนม", "บึงกาฬ"),
    9: ("นครราชสีมา", "ชัยภูมิ", "บุรีรัมย์", "สุรินทร์"),
    10: ("อุบลราชธานี", "ยโสธร", "ศรีสะเกษ", "อำนาจเจริญ", "มุกดาหาร"),
    11: ("สุราษฎร์ธานี", "ชุมพร", "ระนอง", "กระบี่", "พังงา", "ภูเก็ต", "นครศรีธรรมราช"),
    12: ("สงขลา", "สตูล", "ตรัง", "พัทลุง", "ปัตตานี", "ยะลา", "นราธิวาส"),
    13: ("กรุงเทพมหานคร",),
}

PROVINCE_TO_REGION: Mapping[str, int] = MappingProxyType(
    {province: region for region, provinces in _REGIONS.items() for province in provinces}
)
