"""
Generate one brief and one detailed investment report for a sample company and
save both as Markdown files.

The persisted financials come from an in-memory store seeded below, so no
database is needed. News is fetched from NEWS_API_URL and the report text from
the Anthropic API (ANTHROPIC_API_KEY). Without a key the reports come back as
report-shaped error text rather than raising.

Usage:
    python scripts/run_report_example.py [COMPANY_ID]
"""
import os
import sys
import asyncio
import logging
from pathlib import Path

sys.path.insert(0, os.getcwd())
from reporter.core.config import AppConfig
from reporter.orchestration.report_orchestrator import ReportOrchestrator
from reporter.services.financial_record_lookup import FinancialRecordLookup, InMemoryFinancialRecordStore

OUTPUT_DIR = Path(os.getcwd()) / 'scripts' / 'output'

SAMPLE_ROWS = [
    {'company_id': '1', 'company_name': 'Acme Corp', 'sales': 1250000, 'profit': 180000, 'year': 2023},
    {'company_id': '1', 'company_name': 'Acme Corp', 'sales': 1410000, 'profit': 215000, 'year': 2024},
    {'company_id': '2', 'company_name': 'Globex', 'sales': 980000, 'profit': -45000, 'year': 2024},
]


async def main(company_id: str) -> None:
    store = InMemoryFinancialRecordStore(SAMPLE_ROWS)
    orchestrator = ReportOrchestrator(lookup=FinancialRecordLookup(store=store), config=AppConfig.from_env())
    company_name = next((r['company_name'] for r in SAMPLE_ROWS if r['company_id'] == company_id), f'Company {company_id}')

    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    for variant in ('brief', 'detailed'):
        print(f'Generating {variant} report for {company_name}...')
        report = await orchestrator.generate_report(company_name, company_id, variant)
        out_path = OUTPUT_DIR / f'report_{company_id}_{variant}.md'
        out_path.write_text(report, encoding='utf-8')
        print('Saved to', out_path)
    print('Cache stats:', orchestrator.cache.stats())


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else '1'))
