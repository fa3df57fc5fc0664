"""台帳 Excel/CSV のカラム名 → 内部論理名マッピング

全角スペース（U+3000）・前後空白は normalize_header() で統一する。
"""

# 確定ヘッダー → 内部論理名（完全一致マップ）
EXACT_MAP: dict[str, str] = {
    '顧客コード': '顧客コード',
    '墓石コード': '顧客コード',
    '氏名': '氏名',
    'ふりがな': 'ふりがな',
    '電話番号': '電話番号',
    'FAX番号': 'FAX番号',
    'メールアドレス': 'メール',
    '郵便番号': '郵便番号',
    '住所': '住所',
    '期': '期',
    '区域': '区域',
    '許可番号': '許可番号',
    '利用状況': '利用状況',
    '使用料': '使用料',
    '使用料　単価': '使用料単価',
    '管理料': '管理料',
    '管理料　単価': '管理料単価',
    '管理料　請求年数': '管理料請求年数',
    '契約状態': '契約状態',
}

# 表記ゆれ対応エイリアス
COLUMN_ALIASES: dict[str, list[str]] = {
    '顧客コード': ['コード', '顧客番号', '顧客No'],
    '氏名': ['名前', '契約者氏名', '契約者名', '使用者氏名'],
    'ふりがな': ['フリガナ', 'かな', 'カナ', '氏名かな', '振り仮名'],
    '電話番号': ['電話', 'TEL', '電話番号1'],
    '住所': ['現住所', '所在地'],
    'メール': ['メール', 'Email', 'E-mail'],
    '区域': ['区画', '区画詳細'],
}

# 論理名 → CustomerDraft の属性名
FIELD_MAP: dict[str, str] = {
    '顧客コード': 'customer_code',
    '氏名': 'name',
    'ふりがな': 'name_kana',
    '電話番号': 'phone_number',
    'FAX番号': 'fax_number',
    'メール': 'email',
    '郵便番号': 'postal_code',
    '住所': 'address',
    '期': 'plot_period',
    '区域': 'section',
    '許可番号': 'plot_number',
}

# 利用状況の表示名 → PlotUsage 値
USAGE_LABELS: dict[str, str] = {
    '使用中': 'in_use',
    '空き': 'available',
    '予約済': 'reserved',
    '予約済み': 'reserved',
    'in_use': 'in_use',
    'available': 'available',
    'reserved': 'reserved',
}

# 契約状態の表示名 → Customer.status
STATUS_LABELS: dict[str, str] = {
    '契約中': 'active',
    '有効': 'active',
    '解約': 'inactive',
    '無効': 'inactive',
    'active': 'active',
    'inactive': 'inactive',
}


def normalize_header(s: str) -> str:
    """ヘッダー名を正規化する（前後空白除去・全角スペース統一）。"""
    if not isinstance(s, str):
        return str(s)
    s = s.strip()
    # 半角スペース区切りも全角に寄せる（「管理料 単価」→「管理料　単価」）
    s = s.replace(' ', '　')
    return s


def map_columns(df):
    """
    DataFrame のカラム名を内部論理名にマッピングする。

    Returns:
        df_mapped: リネーム済み DataFrame
        unmapped:  マッピングできなかった元のカラム名リスト
    """
    renamed: dict[str, str] = {}
    unmapped: list[str] = []

    for col in df.columns:
        norm = normalize_header(col)
        if norm in EXACT_MAP:
            renamed[col] = EXACT_MAP[norm]
            continue
        for logical, aliases in COLUMN_ALIASES.items():
            if norm in aliases or col in aliases:
                renamed[col] = logical
                break
        else:
            unmapped.append(col)

    df_mapped = df.rename(columns=renamed)
    return df_mapped, unmapped
