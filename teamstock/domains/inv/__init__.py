# teamstock/domains/inv/__init__.py

"""
'inv' 도메인: 품목(Item)과 재고 거래(StockTransaction), 재고 원장(ledger), 보고서 집계(reports)를 담당합니다.
`Item.current_stock`은 품목 생성 이후 ledger 모듈만 변경합니다.
"""
