"""Order-list rendering, purchase-form filling, merging, and orchestration.

Key exports:
    render_order_list_pdf()   — Itemized "Requested Items" PDF for one vendor
    fill_purchase_form()      — Fill the purchase-request AcroForm template
    merge_pdfs()              — Purchase form pages first, order list after
    generate_order_forms()    — One merged PDF per vendor group (async)
    submit_pasted_orders()    — Pasted text → sink, stopping on blocking diagnostics
"""
