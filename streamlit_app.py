"""Streamlit dashboard over the tender vault, reading directly from the Django ORM."""
from __future__ import annotations

import os
import sys
from itertools import islice
from pathlib import Path
from typing import Dict, Iterator, List, Sequence

import pandas as pd
import streamlit as st

# Ensure project root is importable and Django is configured before importing models
BASE_DIR = Path(__file__).resolve().parent
if str(BASE_DIR) not in sys.path:
    sys.path.append(str(BASE_DIR))

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "core.settings")

import django  # noqa: E402

django.setup()

from django.db.models import Q  # noqa: E402
from django.utils import timezone  # noqa: E402

from tenders.models import Tender, TenderCycle  # noqa: E402
from tenders.services.queries import vault_stats  # noqa: E402

st.set_page_config(page_title="Coffre d'appels d'offres", layout="wide")

STATUS_LABELS = dict(Tender.STATUS_CHOICES)


@st.cache_data(ttl=60)
def load_stats() -> Dict:
    return vault_stats()


@st.cache_data(ttl=60)
def build_tenders_dataframe(status: str, keyword: str, limit: int) -> pd.DataFrame:
    qs = Tender.objects.filter(is_deleted=False).select_related("owner")
    if status:
        qs = qs.filter(status=status)
    if keyword:
        qs = qs.filter(Q(title__icontains=keyword) | Q(description__icontains=keyword))
    rows = []
    for tender in qs.order_by("-updated_at", "id")[:limit]:
        rows.append(
            {
                "ID": tender.pk,
                "Titre": tender.title,
                "Propriétaire": tender.owner.username,
                "Statut": STATUS_LABELS.get(tender.status, tender.status),
                "Affichages": f"{tender.usage_count}/{tender.max_usage}",
                "Dernier affichage": tender.last_displayed_at,
                "Cooldown": tender.temporary_archived_until,
                "Budget": f"{tender.budget_min or '-'} - {tender.budget_max or '-'} {tender.currency}",
            }
        )
    return pd.DataFrame(rows)


@st.cache_data(ttl=30)
def build_active_cycles_dataframe() -> pd.DataFrame:
    now = timezone.now()
    rows = []
    cycles = TenderCycle.objects.filter(status=TenderCycle.STATUS_ACTIVE).select_related("tender")
    for cycle in cycles.order_by("display_end_time"):
        remaining = cycle.display_end_time - now
        rows.append(
            {
                "Client": cycle.public_id,
                "Tender": cycle.tender.title,
                "Cycle": cycle.cycle_number,
                "Début": cycle.display_start_time,
                "Fin": cycle.display_end_time,
                "Restant (h)": round(remaining.total_seconds() / 3600, 1),
                "Annonce": cycle.order_id,
            }
        )
    return pd.DataFrame(rows)


def main() -> None:
    stats = load_stats()
    st.title("Coffre d'appels d'offres")
    st.caption("Rotation des tenders : affichages en cours, coffre et retraits")

    cols = st.columns(len(stats["tenders"]) + 1)
    for col, (status, total) in zip(cols, stats["tenders"].items()):
        col.metric(STATUS_LABELS.get(status, status), total)
    cols[-1].metric("Cycles attribués", stats["cycles"]["awarded"])

    st.subheader("Affichages en cours")
    cycles_df = build_active_cycles_dataframe()
    if cycles_df.empty:
        st.info("Aucun tender affiché actuellement.")
    else:
        st.dataframe(cycles_df, use_container_width=True, hide_index=True)

    st.sidebar.header("Filtres")
    status = st.sidebar.selectbox(
        "Statut",
        options=[""] + [value for value, _ in Tender.STATUS_CHOICES],
        format_func=lambda value: STATUS_LABELS.get(value, "Tous"),
    )
    keyword = st.sidebar.text_input("Recherche", placeholder="ex: site web, logo...")
    limit = st.sidebar.slider("Nombre maximum de lignes", min_value=50, max_value=1000, value=200, step=50)

    df = build_tenders_dataframe(status, keyword.strip(), limit)
    st.subheader("Tenders")
    st.write(f"{len(df)} tenders affichés sur {stats['count']} en base")
    if df.empty:
        st.info("Aucun résultat pour ces filtres.")
        return
    st.dataframe(df, use_container_width=True, hide_index=True)
    st.download_button(
        label="Télécharger le JSON",
        data=df.to_json(orient="records", force_ascii=False, indent=2, date_format="iso"),
        file_name="tender_vault.json",
        mime="application/json",
    )

    render_board(df)


def render_board(df: pd.DataFrame) -> None:
    """Colonnes par statut, en lecture seule."""
    st.subheader("Vue par statut")
    max_cards = st.slider("Cartes max par colonne", 3, 15, 6)
    grouped = df.groupby("Statut")
    for chunk in chunked(sorted(grouped.groups.keys()), 4):
        cols = st.columns(len(chunk))
        for col, key in zip(cols, chunk):
            subset = grouped.get_group(key)
            col.markdown(f"**{key}** ({len(subset)})")
            for _, row in subset.head(max_cards).iterrows():
                col.markdown(
                    f"<div style='border:1px solid #d9d9d9;padding:8px;border-radius:6px;margin-bottom:6px;'>"
                    f"<strong>{row['Titre']}</strong><br/>"
                    f"<small>Affichages: {row['Affichages']}<br/>Cooldown: {row['Cooldown']}</small>"
                    "</div>",
                    unsafe_allow_html=True,
                )


def chunked(seq: Sequence, size: int) -> Iterator[List]:
    seq_iter = iter(seq)
    while True:
        block = list(islice(seq_iter, size))
        if not block:
            break
        yield block


if __name__ == "__main__":
    main()
