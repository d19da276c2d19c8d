import logging

import gradio as gr

from json_asset_mapper.config import app_config
from json_asset_mapper.handlers_merge import (
    apply_global_defaults_handler,
    clear_selected_fields,
    handle_files_upload,
    merge_datasets_handler,
    reset_handler,
    select_all_fields,
    update_mapping_table,
)
from json_asset_mapper.mappings import MAPPING_TABLE_HEADERS

logging.basicConfig(
    level=getattr(logging, app_config.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# --- UI Definition ---
with gr.Blocks(title="JSON Asset Mapper") as demo:
    gr.Markdown("# JSON Asset Mapper")
    gr.Markdown(
        "Upload an entries file and an assets file, pick the entry fields to replace, "
        "and map each one to a value looked up from the assets."
    )

    # State
    entries_state = gr.State()
    assets_state = gr.State()

    gr.Markdown("### 1. Upload")
    with gr.Row():
        entries_file = gr.File(label="entries.json", file_types=[".json"])
        assets_file = gr.File(label="assets.json", file_types=[".json"])
    load_btn = gr.Button("Load Files")
    status_msg = gr.Textbox(label="Status", interactive=False)

    gr.Markdown("### 2. Select Fields")
    field_selector = gr.CheckboxGroup(label="Entry fields to replace", choices=[], value=[])
    with gr.Row():
        select_all_btn = gr.Button("Select All")
        clear_all_btn = gr.Button("Clear All")

    gr.Markdown("### 3. Configure Mappings")
    with gr.Row():
        global_match_key = gr.Dropdown(
            label="Default Match Key (asset field)",
            choices=[],
            value=app_config.default_match_key,
            allow_custom_value=True,
            interactive=True,
        )
        global_replace_key = gr.Dropdown(
            label="Default Replace With (asset field)",
            choices=[],
            value=app_config.default_replace_key,
            allow_custom_value=True,
            interactive=True,
        )
    apply_defaults_btn = gr.Button("Apply to All Mappings")
    mapping_table = gr.Dataframe(
        headers=MAPPING_TABLE_HEADERS,
        datatype=["str", "str", "str", "str", "bool"],
        col_count=(len(MAPPING_TABLE_HEADERS), "fixed"),
        interactive=True,
        label="Field Mappings",
    )

    gr.Markdown("### 4. Process & Download")
    merge_filename = gr.Textbox(label="Output Filename (optional)", placeholder=app_config.export_filename)
    with gr.Row():
        merge_btn = gr.Button("Process Merge", variant="primary")
        reset_btn = gr.Button("Start Over")
    merge_status = gr.Textbox(label="Merge Summary", interactive=False, lines=6)
    stats_table = gr.Dataframe(
        headers=["Field", "Matched", "Unmatched"],
        datatype=["str", "number", "number"],
        interactive=False,
        label="Field Statistics",
    )
    merge_download = gr.File(label="Merged Result")
    merged_json = gr.Code(label="Merged JSON Result", language="json", interactive=False)
    merge_preview = gr.JSON(label=f"Preview (first {app_config.preview_limit} rows)")

    load_btn.click(
        fn=handle_files_upload,
        inputs=[entries_file, assets_file],
        outputs=[entries_state, assets_state, field_selector, global_match_key, global_replace_key, status_msg],
    )

    select_all_btn.click(fn=select_all_fields, inputs=[entries_state], outputs=[field_selector])
    clear_all_btn.click(fn=clear_selected_fields, inputs=[], outputs=[field_selector])

    field_selector.change(
        fn=update_mapping_table,
        inputs=[field_selector, mapping_table, global_match_key, global_replace_key],
        outputs=[mapping_table],
    )

    apply_defaults_btn.click(
        fn=apply_global_defaults_handler,
        inputs=[mapping_table, global_match_key, global_replace_key],
        outputs=[mapping_table],
    )

    merge_btn.click(
        fn=merge_datasets_handler,
        inputs=[entries_state, assets_state, mapping_table, merge_filename],
        outputs=[merge_download, merge_status, stats_table, merged_json, merge_preview],
    )

    reset_btn.click(
        fn=reset_handler,
        inputs=[],
        outputs=[
            entries_file,
            assets_file,
            entries_state,
            assets_state,
            status_msg,
            field_selector,
            global_match_key,
            global_replace_key,
            mapping_table,
            merge_filename,
            merge_download,
            merge_status,
            stats_table,
            merged_json,
            merge_preview,
        ],
    )

if __name__ == "__main__":
    demo.launch(server_name=app_config.server_name, server_port=app_config.server_port)
